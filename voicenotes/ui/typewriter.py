"""Character-by-character reveal of the running transcript."""


class TypewriterFeed:
    """Reveals new transcript text one character per ``tick()``.

    Only the suffix added since the previous ``update()`` is typed; text
    already shown is never retyped. A transcript that does not extend the
    previous one (a new session) restarts the display.
    """

    def __init__(self):
        self.displayed_text = ""
        self.last_transcript = ""
        self._pending = ""

    def update(self, transcript: str) -> None:
        if transcript == self.last_transcript:
            return
        if transcript.startswith(self.last_transcript):
            self._pending += transcript[len(self.last_transcript):]
        else:
            self.displayed_text = ""
            self._pending = transcript
        self.last_transcript = transcript

    def tick(self) -> bool:
        """Reveal one character. Returns True while characters remain."""
        if not self._pending:
            return False
        self.displayed_text += self._pending[0]
        self._pending = self._pending[1:]
        return bool(self._pending)

    @property
    def is_typing(self) -> bool:
        return bool(self._pending)

    def reset(self) -> None:
        self.displayed_text = ""
        self.last_transcript = ""
        self._pending = ""
