"""
Output Sinks
============

Delivery endpoints for announcements.

A sink is any callable taking the final text. Sinks are allowed to fail;
the channel and the output queue catch and log those failures so one
unavailable device never breaks the pipeline.

Backends:
    - SpeechSink: the active screen reader via accessible_output2
    - ClipboardSink: the OS clipboard via pyperclip
    - LogSink: structured log only (headless runs)
    - RecordingSink: keeps delivered texts in memory
"""

from typing import Any, Callable, Optional, Protocol

from a11y_announcer.errors import SinkUnavailableError
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)


class Sink(Protocol):
    """Anything that can receive a finished announcement."""

    def __call__(self, text: str) -> None: ...


class SpeechSink:
    """
    Speaks through whichever screen reader is running.

    Uses ``accessible_output2``'s automatic output selection (NVDA, JAWS,
    SAPI, VoiceOver, ...). The backend is created once; individual
    ``speak`` calls may still fail if the screen reader goes away.
    """

    def __init__(self, interrupt: bool = False, output: Optional[Any] = None) -> None:
        """
        Initialize the speech sink.

        Args:
            interrupt: Whether each utterance interrupts current speech.
            output: Pre-built output object (anything with ``speak``);
                    defaults to ``accessible_output2.outputs.auto.Auto()``.

        Raises:
            SinkUnavailableError: If no speech backend can be created.
        """
        self.interrupt = interrupt
        if output is None:
            try:
                from accessible_output2.outputs.auto import Auto

                output = Auto()
            except ImportError as e:
                raise SinkUnavailableError("accessible_output2", "not installed") from e
            except Exception as e:
                raise SinkUnavailableError("accessible_output2", str(e)) from e
        self._output = output
        logger.info("Speech sink initialized", interrupt=interrupt)

    def __call__(self, text: str) -> None:
        self._output.speak(text, interrupt=self.interrupt)

    def silence(self) -> None:
        """Stop current speech, if the backend supports it."""
        silence = getattr(self._output, "silence", None)
        if silence is not None:
            silence()


class ClipboardSink:
    """Copies each announcement to the OS clipboard for external readers."""

    def __init__(self, copy: Optional[Callable[[str], None]] = None) -> None:
        """
        Initialize the clipboard sink.

        Args:
            copy: Clipboard writer; defaults to ``pyperclip.copy``.
        """
        if copy is None:
            import pyperclip

            copy = pyperclip.copy
        self._copy = copy

    def __call__(self, text: str) -> None:
        self._copy(text)


class LogSink:
    """Logs announcements instead of voicing them."""

    def __init__(self, name: str = "output") -> None:
        self.name = name

    def __call__(self, text: str) -> None:
        logger.info("Announcement", sink=self.name, text=text)


class RecordingSink:
    """Keeps every delivered text, optionally failing on demand."""

    def __init__(self) -> None:
        self.texts: list[str] = []
        self.fail_with: Optional[BaseException] = None

    def __call__(self, text: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.texts.append(text)

    @property
    def last(self) -> Optional[str]:
        return self.texts[-1] if self.texts else None

    def clear(self) -> None:
        self.texts.clear()


def create_speech_sink(backend: str, interrupt: bool = False) -> Sink:
    """
    Build the speech sink named in configuration.

    Falls back to ``LogSink`` when the screen reader backend is unavailable,
    so the service still starts on machines without one.
    """
    if backend == "auto":
        try:
            return SpeechSink(interrupt=interrupt)
        except SinkUnavailableError as e:
            logger.error("Speech backend unavailable, logging instead", error=str(e))
    return LogSink("speech")


def create_clipboard_sink(backend: str) -> Sink:
    """Build the clipboard sink named in configuration."""
    if backend == "pyperclip":
        return ClipboardSink()
    return LogSink("clipboard")
