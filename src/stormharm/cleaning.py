"""Per-record cleaning: project → normalize → decode → multiply.

Every record is cleaned on its own, so a dataset can be split into
contiguous ranges, cleaned in parallel, and stitched back together in the
original order with no coordination between workers.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from functools import partial

from .errors import MalformedRecordError, UnknownExponentCodeError
from .event_types import normalize_event_type
from .exponents import DamageField, decode
from .projection import project

logger = logging.getLogger(__name__)

CLEANED_COLUMNS: list[str] = [
    "event.type",
    "health.fatalities",
    "health.injuries",
    "economic.property.damage",
    "economic.crop.damage",
]

ON_MALFORMED_CHOICES: tuple[str, ...] = ("skip", "abort")


@dataclass(frozen=True)
class SkippedRecord:
    position: int
    field: str
    value: object
    reason: str


@dataclass
class CleanResult:
    """Output of one clean() call.

    ``unknown_codes`` counts, per ``(field, code)``, the cleaned records
    whose exponent code had no multiplier and was decoded as 1.
    """

    records: list[dict[str, object]] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)
    unknown_codes: Counter = field(default_factory=Counter)


def clean_record(
    raw: Mapping[str, object],
    *,
    strict_exponents: bool = False,
    unknown: Counter | None = None,
) -> dict[str, object]:
    """Turn one raw record into a cleaned record.

    Either every step succeeds or an exception is raised; a half-cleaned
    record is never returned. Unknown exponent codes are tallied into
    ``unknown`` when given, otherwise each one logs a warning.

    Raises:
        MalformedRecordError: A numeric field is missing, non-numeric or
            negative, or (with ``strict_exponents``) an exponent code is
            not in its field's table.
    """
    projected = project(raw)

    # Merged into the caller's tally only once the record is fully cleaned
    record_unknown: Counter = Counter()
    try:
        property_multiplier = decode(
            projected["economic.property.damage.exponent"],
            DamageField.PROPERTY,
            strict=strict_exponents,
            unknown=record_unknown,
        )
        crop_multiplier = decode(
            projected["economic.crop.damage.exponent"],
            DamageField.CROP,
            strict=strict_exponents,
            unknown=record_unknown,
        )
    except UnknownExponentCodeError as exc:
        column = "PROPDMGEXP" if exc.field == DamageField.PROPERTY.value else "CROPDMGEXP"
        raise MalformedRecordError(column, exc.code, "is not a known exponent code") from exc

    if unknown is not None:
        unknown.update(record_unknown)
    else:
        _log_unknown_codes(record_unknown)

    return {
        "event.type": normalize_event_type(projected["event.type"]).value,
        "health.fatalities": projected["health.fatalities"],
        "health.injuries": projected["health.injuries"],
        "economic.property.damage": projected["economic.property.damage"] * property_multiplier,
        "economic.crop.damage": projected["economic.crop.damage"] * crop_multiplier,
    }


def _log_unknown_codes(unknown: Counter) -> None:
    for (field_name, code), count in sorted(unknown.items()):
        logger.warning(
            "Unknown %s damage exponent code %r on %s records, using multiplier 1",
            field_name,
            code,
            f"{count:,}",
        )


def _clean_range(
    start: int,
    records: Sequence[Mapping[str, object]],
    on_malformed: str,
    strict_exponents: bool,
) -> CleanResult:
    result = CleanResult()
    for offset, raw in enumerate(records):
        position = start + offset
        try:
            result.records.append(
                clean_record(
                    raw,
                    strict_exponents=strict_exponents,
                    unknown=result.unknown_codes,
                )
            )
        except MalformedRecordError as exc:
            if on_malformed == "abort":
                raise exc.at(position) from exc
            result.skipped.append(
                SkippedRecord(position, exc.field, exc.value, exc.reason)
            )
    return result


def _partition(n_records: int, n_parts: int) -> list[tuple[int, int]]:
    """Split range(n_records) into at most n_parts contiguous (start, stop) pairs."""
    n_parts = max(1, min(n_parts, n_records))
    size, extra = divmod(n_records, n_parts)
    bounds = []
    start = 0
    for i in range(n_parts):
        stop = start + size + (1 if i < extra else 0)
        bounds.append((start, stop))
        start = stop
    return bounds


def clean(
    raw_dataset: Sequence[Mapping[str, object]],
    *,
    on_malformed: str = "skip",
    strict_exponents: bool = False,
    n_workers: int = 1,
) -> CleanResult:
    """Clean every record of a raw dataset, preserving input order.

    Args:
        raw_dataset: Raw records keyed by the original column names.
        on_malformed: "skip" drops bad records and reports each one in
            ``CleanResult.skipped``; "abort" raises on the first one.
        strict_exponents: Treat unknown exponent codes as malformed
            records instead of decoding them to 1.
        n_workers: Number of worker processes. 1 runs in-process.

    Returns:
        CleanResult with the cleaned records (input order) and the skipped
        records.

    Raises:
        ValueError: ``on_malformed`` is not one of "skip" or "abort".
        MalformedRecordError: ``on_malformed="abort"`` and a record is bad;
            ``position`` identifies it.
    """
    if on_malformed not in ON_MALFORMED_CHOICES:
        raise ValueError(
            f"on_malformed must be one of {ON_MALFORMED_CHOICES}, got {on_malformed!r}"
        )
    if n_workers < 1:
        raise ValueError(f"n_workers must be at least 1, got {n_workers}")

    worker = partial(
        _clean_range,
        on_malformed=on_malformed,
        strict_exponents=strict_exponents,
    )

    if n_workers == 1 or len(raw_dataset) < 2:
        result = worker(0, raw_dataset)
    else:
        bounds = _partition(len(raw_dataset), n_workers)
        starts = [start for start, _ in bounds]
        chunks = [list(raw_dataset[start:stop]) for start, stop in bounds]
        logger.info(
            "Cleaning %s records in %d ranges across %d workers",
            f"{len(raw_dataset):,}",
            len(chunks),
            n_workers,
        )
        result = CleanResult()
        # Executor.map yields in submission order, which restores input order
        with ProcessPoolExecutor(max_workers=n_workers) as pool:
            for part in pool.map(worker, starts, chunks):
                result.records.extend(part.records)
                result.skipped.extend(part.skipped)
                result.unknown_codes.update(part.unknown_codes)

    # Logged here, in the calling process, once per call
    _log_unknown_codes(result.unknown_codes)

    logger.info(
        "Cleaned %s of %s records (skipped %s)",
        f"{len(result.records):,}",
        f"{len(raw_dataset):,}",
        f"{len(result.skipped):,}",
    )
    return result
