"""Recreate an alternative group from a source root inside an overlay root."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from useralt.backend import AlternativesBackend
from useralt.errors import ParseError, SourceNotFound
from useralt.overlay import OverlayRoot
from useralt.paths.relativize import relativize, require_relative
from useralt.paths.search import SearchPaths
from useralt.query.models import NO_CURRENT_VALUE, GroupReport
from useralt.query.parser import parse_query_text

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SecondaryLink:
    """One secondary link installed alongside a candidate."""

    link: Path
    name: str
    value: str


@dataclass(frozen=True, slots=True)
class InstallOperation:
    """Register one candidate for a group under the target root."""

    link: Path
    name: str
    value: str
    priority: int
    children: tuple[SecondaryLink, ...] = ()

    def to_args(self) -> list[str]:
        args = ["--install", str(self.link), self.name, self.value, str(self.priority)]
        for child in self.children:
            args.extend(["--slave", str(child.link), child.name, child.value])
        return args

    def describe(self) -> str:
        return f"install {self.name} {self.value} priority={self.priority} link={self.link} slaves={len(self.children)}"


@dataclass(frozen=True, slots=True)
class ActivateOperation:
    """Pin the group to one value, as `--set` does."""

    name: str
    value: str

    def to_args(self) -> list[str]:
        return ["--set", self.name, self.value]

    def describe(self) -> str:
        return f"set {self.name} {self.value}"


Operation = InstallOperation | ActivateOperation


@dataclass(frozen=True, slots=True)
class ImportPlan:
    """Ordered operations that reproduce a group, plus non-fatal skips."""

    name: str
    operations: tuple[Operation, ...]
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of one import run."""

    name: str
    source: OverlayRoot
    target: OverlayRoot
    report: GroupReport
    plan: ImportPlan
    applied: tuple[Operation, ...]


def plan_import(
    report: GroupReport,
    target: OverlayRoot,
    search_paths: SearchPaths,
    logger: logging.Logger | None = None,
) -> ImportPlan:
    """Build install/activate operations for `report` relocated under `target`.

    The primary link must be classifiable. A secondary link that cannot be
    classified, or that has no value for a candidate, is skipped with a warning.
    Candidates keep their report order.
    """

    effective_logger = logger or LOGGER
    primary = require_relative(report.primary_link, search_paths)
    primary_link = target.link_path(primary.path)

    warnings: list[str] = []
    slave_targets: dict[int, Path] = {}
    for slave_index, (slave_name, slave_link) in enumerate(zip(report.slave_names, report.slave_links)):
        relative = relativize(slave_link, search_paths)
        if relative is None:
            message = f"skipping slave {slave_name}: cannot classify {slave_link}"
            effective_logger.warning("importer.slave_unresolvable name=%s slave=%s link=%s", report.name, slave_name, slave_link)
            warnings.append(message)
            continue
        slave_targets[slave_index] = target.link_path(relative.path)

    operations: list[Operation] = []
    for candidate in report.candidates:
        children: list[SecondaryLink] = []
        for slave_index, child_link in slave_targets.items():
            child_value = candidate.secondary_values.get(slave_index)
            slave_name = report.slave_names[slave_index]
            if child_value is None:
                effective_logger.warning(
                    "importer.slave_missing name=%s value=%s slave=%s",
                    report.name,
                    candidate.value,
                    slave_name,
                )
                warnings.append(f"skipping slave {slave_name} for {candidate.value}: no value recorded")
                continue
            children.append(SecondaryLink(link=child_link, name=slave_name, value=child_value))
        operations.append(
            InstallOperation(
                link=primary_link,
                name=report.name,
                value=candidate.value,
                priority=candidate.priority,
                children=tuple(children),
            )
        )

    if report.is_manual and report.current_value != NO_CURRENT_VALUE:
        operations.append(ActivateOperation(name=report.name, value=report.current_value))

    return ImportPlan(name=report.name, operations=tuple(operations), warnings=tuple(warnings))


def find_source_report(
    name: str,
    sources: Sequence[OverlayRoot],
    backend: AlternativesBackend,
    logger: logging.Logger | None = None,
) -> tuple[OverlayRoot, GroupReport]:
    """Query each root in order; the first non-empty report that parses wins.

    A report that fails to parse is logged and the next root is tried. When no
    root succeeds, `SourceNotFound` is raised from the last parse failure.
    """

    effective_logger = logger or LOGGER
    last_error: ParseError | None = None
    for root in sources:
        raw_report = backend.query(root, name)
        if not raw_report.strip():
            effective_logger.info("importer.source_empty name=%s root=%s", name, root.name)
            continue
        try:
            report = parse_query_text(raw_report)
        except ParseError as exc:
            effective_logger.warning("importer.source_unparseable name=%s root=%s error=%s", name, root.name, exc)
            last_error = exc
            continue
        effective_logger.info("importer.source_found name=%s root=%s candidates=%s", name, root.name, len(report.candidates))
        return root, report
    raise SourceNotFound(name, roots=[root.describe() for root in sources]) from last_error


def apply_operations(
    operations: Sequence[Operation],
    target: OverlayRoot,
    backend: AlternativesBackend,
    logger: logging.Logger | None = None,
) -> tuple[Operation, ...]:
    """Run operations one at a time; the first failure propagates without rollback."""

    effective_logger = logger or LOGGER
    applied: list[Operation] = []
    for operation in operations:
        effective_logger.info("importer.apply root=%s %s", target.name, operation.describe())
        try:
            backend.run(target, operation.to_args())
        except Exception:
            effective_logger.error(
                "importer.apply_failed root=%s applied=%s remaining=%s",
                target.name,
                len(applied),
                len(operations) - len(applied),
            )
            raise
        applied.append(operation)
    return tuple(applied)


def import_group(
    name: str,
    target: OverlayRoot,
    sources: Sequence[OverlayRoot],
    backend: AlternativesBackend,
    search_paths: SearchPaths,
    logger: logging.Logger | None = None,
) -> ImportResult:
    """Copy group `name` from the first source root that has it into `target`."""

    effective_logger = logger or LOGGER
    source, report = find_source_report(name, sources, backend, logger=effective_logger)
    plan = plan_import(report, target, search_paths, logger=effective_logger)
    applied = apply_operations(plan.operations, target, backend, logger=effective_logger)
    effective_logger.info(
        "importer.summary name=%s source=%s target=%s operations=%s warnings=%s",
        name,
        source.name,
        target.name,
        len(applied),
        len(plan.warnings),
    )
    return ImportResult(
        name=name,
        source=source,
        target=target,
        report=report,
        plan=plan,
        applied=applied,
    )
