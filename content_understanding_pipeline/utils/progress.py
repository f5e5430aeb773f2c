"""Progress display for batch runs.

ProgressBar wraps tqdm and shows how many documents have been analyzed, with
a running succeeded/failed tally after the bar. Falls back to ASCII bars on
terminals without unicode support.
"""

from tqdm import tqdm

from .logging import _supports_unicode

BAR_FORMAT = "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}{postfix}]"


class ProgressBar:
    """Context-managed tqdm bar for a batch of documents.

    Example:
        >>> with ProgressBar(total=len(docs), desc="Analyzing") as pbar:
        ...     for doc in docs:
        ...         row = orchestrator.process_document(doc, analyzer)
        ...         pbar.advance(row.succeeded)
    """

    def __init__(
        self, total: int, desc: str, unit: str = "document", disable: bool = False
    ) -> None:
        """
        Args:
            total: Number of documents in the batch
            desc: Label shown before the bar
            unit: Unit label for items
            disable: Draw nothing, e.g. for an empty batch
        """
        self.total = total
        self.desc = desc
        self.unit = unit
        self.disable = disable
        self.succeeded = 0
        self.failed = 0
        self._pbar: tqdm | None = None

    def __enter__(self) -> "ProgressBar":
        self._pbar = tqdm(
            total=self.total,
            desc=self.desc,
            unit=self.unit,
            ncols=80,
            bar_format=BAR_FORMAT,
            ascii=not _supports_unicode(),
            disable=self.disable,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def advance(self, succeeded: bool) -> None:
        """Count one finished document and refresh the tally."""
        if succeeded:
            self.succeeded += 1
        else:
            self.failed += 1
        if self._pbar is not None:
            self._pbar.set_postfix({"ok": self.succeeded, "failed": self.failed})
            self._pbar.update(1)

    def close(self) -> None:
        """Close the bar. Safe to call more than once."""
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None
