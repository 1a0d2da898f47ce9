from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel, Field, PositiveInt

from .rules import DEFAULT_TAB_WIDTH


WhitespaceMode = Literal["expand", "unexpand"]

FileAction = Literal[
    "rewritten",
    "unchanged",
    "previewed",
    "skipped-extension",
    "skipped-variant",
    "skipped-binary",
]


class TransformOptions(BaseModel):
    tab_width: PositiveInt = Field(default=DEFAULT_TAB_WIDTH, examples=[4])
    expand: bool = False
    unexpand: bool = False

    @property
    def whitespace_mode(self) -> Optional[WhitespaceMode]:
        # expand takes precedence when both are requested
        if self.expand:
            return "expand"
        if self.unexpand:
            return "unexpand"
        return None


class RunOptions(TransformOptions):
    backup: bool = False
    preview: bool = False
    skip_variants: bool = False
    verbose: bool = False


class DecodedSource(BaseModel):
    text: str
    encoding: str = Field(default="utf-8")


class TransformStats(BaseModel):
    lines: int = 0
    lines_changed: int = 0

    @property
    def changed(self) -> bool:
        return self.lines_changed > 0


class FileReport(BaseModel):
    path: str
    action: FileAction
    encoding: Optional[str] = None
    lines: int = 0
    lines_changed: int = 0
    backup: Optional[str] = None


class RunSummary(BaseModel):
    files_seen: int = 0
    files_changed: int = 0
    files_skipped: int = 0
    reports: List[FileReport] = Field(default_factory=list)

    def add(self, report: FileReport) -> None:
        self.files_seen += 1
        if report.action == "rewritten":
            self.files_changed += 1
        elif report.action.startswith("skipped"):
            self.files_skipped += 1
        self.reports.append(report)


class TransformedSource(BaseModel):
    sha256: str
    encoding: str = Field(default="utf-8")
    content_b64: str


class TransformReport(BaseModel):
    lines: int = 0
    lines_changed: int = 0
    changed: bool = False
    mode: Optional[WhitespaceMode] = Field(default=None, examples=["expand"])
    tab_width: int = DEFAULT_TAB_WIDTH


class TransformResponse(BaseModel):
    transformed_source: TransformedSource
    report: TransformReport

class HealthResponse(BaseModel):
    ok: bool = True
