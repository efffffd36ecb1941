"""Sources of installable charts.

A chart source yields one :class:`~chartplan.domain.ChartRecord` per chart,
carrying the chart name and its raw annotations. Parsing the annotations is
left to :mod:`chartplan.annotations`.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Union

import yaml

from chartplan.domain import ChartRecord
from chartplan.errors import InvalidCollectionError

__all__ = ["ChartSource", "StaticChartSource", "DirectoryChartSource"]

logger = logging.getLogger(__name__)

CHART_FILE = "Chart.yaml"


class ChartSource(ABC):
    @abstractmethod
    def charts(self) -> list[ChartRecord]:
        """Return every chart known to the source."""


class StaticChartSource(ChartSource):
    """A chart source over records held in memory."""

    def __init__(self, records: Iterable[ChartRecord]):
        self._records = list(records)

    def charts(self) -> list[ChartRecord]:
        return list(self._records)


class DirectoryChartSource(ChartSource):
    """Reads charts laid out as ``<root>/<charts_dir>/<chart>/Chart.yaml``.

    Chart directories are visited in sorted order. A directory without a
    ``Chart.yaml`` is skipped.

    Args:
        root: Installer directory.
        charts_dir: Directory, relative to ``root``, holding one directory per chart.
    """

    def __init__(self, root: Union[str, Path], charts_dir: str = "charts"):
        self._charts_path = Path(root) / charts_dir

    def charts(self) -> list[ChartRecord]:
        if not self._charts_path.is_dir():
            raise InvalidCollectionError(f"charts directory {str(self._charts_path)!r} not found")

        records = []
        for chart_dir in sorted(p for p in self._charts_path.iterdir() if p.is_dir()):
            chart_file = chart_dir / CHART_FILE
            if not chart_file.is_file():
                logger.debug(f"Skipping {str(chart_dir)!r}, no {CHART_FILE} found")
                continue
            records.append(_read_chart(chart_file))
        return records


def _read_chart(chart_file: Path) -> ChartRecord:
    try:
        metadata = yaml.safe_load(chart_file.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as err:
        raise InvalidCollectionError(f"can't read chart {str(chart_file)!r}: {err}") from err

    if not isinstance(metadata, dict):
        raise InvalidCollectionError(f"chart {str(chart_file)!r} must be a mapping")

    annotations = metadata.get("annotations") or {}
    if not isinstance(annotations, dict):
        raise InvalidCollectionError(f"annotations of chart {str(chart_file)!r} must be a mapping")

    return ChartRecord(
        name=str(metadata.get("name") or chart_file.parent.name),
        annotations={str(key): _annotation_value(value) for key, value in annotations.items()},
    )


def _annotation_value(value: Any) -> str:
    """Render an annotation value as the string Kubernetes would store."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
