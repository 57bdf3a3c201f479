from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from jinja2 import Environment, PackageLoader, select_autoescape

from ..detect.line_parser import parse_line
from ..engine.planner import RenderInstruction


@dataclass
class ReportLine:
    line: int
    key: str
    value: str
    style: str


@dataclass
class ShelterReport:
    filename: str
    total_lines: int
    lines: List[ReportLine] = field(default_factory=list)

    @property
    def masked(self) -> int:
        return sum(1 for ln in self.lines if ln.style == "masked")


def build_report(filename: str, lines: Sequence[str], instructions: Sequence[RenderInstruction]) -> ShelterReport:
    """Only planned text goes into the report, never the raw value of a masked line."""
    report = ShelterReport(filename=filename, total_lines=len(lines))
    for ins in sorted(instructions, key=lambda i: i.line):
        parsed = parse_line(lines[ins.line - 1])
        key = parsed.key if parsed else ""
        report.lines.append(ReportLine(ins.line, key, ins.text, ins.style_tag.value))
    return report


def write_report(report: ShelterReport, path: Path) -> None:
    env = Environment(
        loader=PackageLoader("envshelter.reporting", "templates"),
        autoescape=select_autoescape(enabled_extensions=("html", "j2"))
    )
    tmpl = env.get_template("report.html.j2")
    html = tmpl.render(report=report)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html)
