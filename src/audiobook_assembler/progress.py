"""Console progress bar for the encode step."""

import click

from .models import PROGRESS_BAR_WIDTH


class ProgressBar:
    """Fixed-width bar redrawn in place: ``[#####-----] 12.3% ``.

    Never moves backwards; a lower percent than already shown is ignored.
    """

    def __init__(self, width: int = PROGRESS_BAR_WIDTH) -> None:
        self.width = width
        self.percent = 0.0
        self._drawn = False

    def render(self, percent: float) -> str:
        filled = int(percent / 100 * self.width)
        return f"[{'#' * filled}{'-' * (self.width - filled)}] {percent:.1f}% "

    def __call__(self, percent: float) -> None:
        percent = min(100.0, max(0.0, percent))
        if self._drawn and percent <= self.percent:
            return
        self.percent = percent
        self._drawn = True
        click.echo("\r" + self.render(percent), nl=False)

    def finish(self) -> None:
        if self._drawn:
            click.echo("")
