"""Error kinds raised by the comparison engine and the insight step."""

from __future__ import annotations

from typing import Any


class ShotdiffError(Exception):
    """Base class for all shotdiff errors."""

    code = "SHOTDIFF_ERROR"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class CodecError(ShotdiffError):
    """Image bytes could not be decoded or encoded as PNG."""

    code = "CODEC_ERROR"


class DimensionMismatchError(ShotdiffError):
    """Baseline and current images do not share width and height."""

    code = "DIMENSION_MISMATCH"

    def __init__(
        self,
        baseline_width: int,
        baseline_height: int,
        current_width: int,
        current_height: int,
    ) -> None:
        self.baseline_width = baseline_width
        self.baseline_height = baseline_height
        self.current_width = current_width
        self.current_height = current_height
        super().__init__(
            f"size mismatch: baseline {baseline_width}x{baseline_height}"
            f" vs current {current_width}x{current_height}"
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            baseline_width=self.baseline_width,
            baseline_height=self.baseline_height,
            current_width=self.current_width,
            current_height=self.current_height,
        )
        return data


class InsightUnavailableError(ShotdiffError):
    """The semantic classifier could not produce a trusted insight.

    Raised when the classifier is disabled or unreachable, answers with a
    non-success status, or returns content that fails schema validation.
    """

    code = "INSIGHT_UNAVAILABLE"

    def __init__(self, message: str, *, status: int | None = None, detail: str | None = None) -> None:
        self.status = status
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.status is not None:
            data["status"] = self.status
        if self.detail:
            data["detail"] = self.detail
        return data
