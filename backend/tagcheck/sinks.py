"""
Output sinks receiving defects from the validation engine.

A sink gets every defect immediately, in the order the checks complete.
"""

import json
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import IO, Any, Dict, Iterable, Iterator, List, Optional, Union

import pandas as pd

from .base import Defect
from .config import DEFAULT_CONFIG

TAG_FIELD = 'tag'
SUMMARY_SHEET = 'summary'


class DefectSink(ABC):
    """Destination for defects."""

    @abstractmethod
    def write(self, defect: Defect) -> None:
        """Persist a single defect."""
        pass


class ListSink(DefectSink):
    """Keeps all defects in memory, in arrival order."""

    def __init__(self):
        self.defects: List[Defect] = []

    def write(self, defect: Defect) -> None:
        self.defects.append(defect)

    def __iter__(self) -> Iterator[Defect]:
        return iter(self.defects)

    def __len__(self) -> int:
        return len(self.defects)

    def get_counts_by_category(self) -> Dict[str, int]:
        """Group defect counts by category."""
        counts = defaultdict(int)
        for d in self.defects:
            counts[d.category] += 1
        return dict(counts)

    def get_counts_by_kind(self) -> Dict[str, int]:
        """Group defect counts by feature kind."""
        counts = defaultdict(int)
        for d in self.defects:
            counts[d.feature_kind.value] += 1
        return dict(counts)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'defect_count': len(self.defects),
            'defects': [d.to_dict() for d in self.defects],
            'defects_by_category': self.get_counts_by_category(),
            'defects_by_kind': self.get_counts_by_kind(),
        }


def _render_geometry(geometry: Any) -> Optional[str]:
    if geometry is None:
        return None
    if isinstance(geometry, (dict, list)):
        return json.dumps(geometry)
    return str(geometry)


class TableSink(DefectSink):
    """
    Collects defects into one table per category.

    Every table has the columns feature_id, the focus field of the
    category (if any), tags and geometry. The focus field is named after
    the focus key of the category, e.g. "maxspeed". Categories of per-tag
    rule sets get a "tag" field holding the offending key=value instead.
    """

    def __init__(
        self,
        focus_fields: Optional[Dict[str, Optional[str]]] = None,
        tag_categories: Iterable[str] = (),
        max_field_length: int = DEFAULT_CONFIG.max_field_length,
    ):
        self.focus_fields = dict(focus_fields or {})
        # ordered, so the sheet order of the workbook is stable
        self.tag_categories = tuple(dict.fromkeys(tag_categories))
        for category in self.tag_categories:
            self.focus_fields[category] = TAG_FIELD
        self.max_field_length = max_field_length
        self.tables: Dict[str, List[dict]] = {category: [] for category in self.focus_fields}

    @classmethod
    def from_registry(cls, registry, max_field_length: int = DEFAULT_CONFIG.max_field_length) -> 'TableSink':
        """Create one table for every category of the registry."""
        focus_fields = {}
        tag_categories = []
        for rule_set in registry.get_all_rule_sets():
            for check in rule_set.checks:
                if rule_set.per_tag:
                    tag_categories.append(check.category)
                else:
                    focus_fields[check.category] = check.focus_key
        return cls(focus_fields, tag_categories, max_field_length)

    def _focus_field(self, defect: Defect) -> Optional[str]:
        if defect.category not in self.focus_fields:
            self.focus_fields[defect.category] = defect.focus_key
        return self.focus_fields[defect.category]

    def write(self, defect: Defect) -> None:
        field_name = self._focus_field(defect)
        row = {'feature_id': defect.feature_id}
        if field_name == TAG_FIELD and defect.category in self.tag_categories:
            row[TAG_FIELD] = f"{defect.focus_key}={defect.focus_value}"[:self.max_field_length]
        elif field_name is not None:
            row[field_name] = defect.focus_value
        row['tags'] = defect.other_tags[:self.max_field_length]
        row['geometry'] = defect.geometry
        self.tables.setdefault(defect.category, []).append(row)

    def columns(self, category: str) -> List[str]:
        field_name = self.focus_fields.get(category)
        if field_name is None:
            return ['feature_id', 'tags', 'geometry']
        return ['feature_id', field_name, 'tags', 'geometry']

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """Return one DataFrame per category, including empty ones."""
        return {
            category: pd.DataFrame(rows, columns=self.columns(category))
            for category, rows in self.tables.items()
        }

    def write_excel(
        self,
        target: Union[str, IO[bytes]],
        extra_frames: Optional[Dict[str, pd.DataFrame]] = None,
    ) -> None:
        """
        Write a workbook with a summary sheet and one sheet per category.

        extra_frames (e.g. the place export) are appended as further sheets.
        """
        frames = self.to_frames()
        with pd.ExcelWriter(target, engine='openpyxl') as writer:
            summary = pd.DataFrame({
                'category': list(frames.keys()),
                'defects': [len(frame) for frame in frames.values()],
            })
            summary.to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)

            for category, frame in frames.items():
                frame = frame.assign(geometry=frame['geometry'].map(_render_geometry))
                # Excel limits sheet names to 31 characters
                frame.to_excel(writer, sheet_name=category[:31], index=False)

            for name, frame in (extra_frames or {}).items():
                if 'geometry' in frame.columns:
                    frame = frame.assign(geometry=frame['geometry'].map(_render_geometry))
                frame.to_excel(writer, sheet_name=name[:31], index=False)
