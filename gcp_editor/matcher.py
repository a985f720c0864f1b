"""
Image-to-GCP matching.

Given the file names of uploaded images and the records of one GCP, works out
which images already show that point, lets the user toggle images in or out,
and writes the chosen set back into the grouped index.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from enum import Enum

from gcp_editor.points import GcpPoint, GroupedIndex

logger = logging.getLogger(__name__)


class DefaultCoordinatePolicy(Enum):
    """How a newly tagged image gets its world coordinates."""

    INHERIT_FIRST = "inherit"
    """Copy x, y, z from the first existing record of the GCP."""

    MANUAL_ENTRY = "manual"
    """Leave x and y empty so the record is flagged for manual entry."""

    @classmethod
    def parse(cls, value: str | DefaultCoordinatePolicy) -> DefaultCoordinatePolicy:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = [p.value for p in cls]
            raise ValueError(
                f"Invalid policy '{value}'. Must be one of: {', '.join(valid)}"
            ) from None


@dataclass(frozen=True)
class ImageTag:
    """An uploaded image and its association with the current GCP.

    Attributes:
        name: Image file name.
        associated: True when the image is tagged with the GCP.
        selected: True when the image will be kept on save.
    """

    name: str
    associated: bool
    selected: bool

    def toggled(self) -> ImageTag:
        return replace(self, associated=not self.associated, selected=not self.selected)


def _associated_first(tags: Iterable[ImageTag]) -> tuple[ImageTag, ...]:
    return tuple(sorted(tags, key=lambda tag: not tag.associated))


@dataclass(frozen=True)
class ImageSelection:
    """Immutable tagging state for one GCP.

    Attributes:
        gcp_name: Name of the GCP the images are being tagged for.
        tags: Image tags, associated images first.
        known_images: Image names the GCP already had when matching started.
    """

    gcp_name: str
    tags: tuple[ImageTag, ...] = ()
    known_images: frozenset[str] = frozenset()

    def __len__(self) -> int:
        return len(self.tags)

    def add(self, image_names: Iterable[str]) -> ImageSelection:
        """Return a selection with more uploaded images appended.

        Names already in the selection are ignored, so re-uploading an image
        never produces a second tag for it.
        """
        seen = {tag.name for tag in self.tags}
        new_tags = []
        for name in image_names:
            if name in seen:
                continue
            seen.add(name)
            known = name in self.known_images
            new_tags.append(ImageTag(name=name, associated=known, selected=known))
        return replace(self, tags=_associated_first([*self.tags, *new_tags]))

    def toggle(self, image: str | int) -> ImageSelection:
        """Return a selection with one image flipped in or out.

        Args:
            image: Image file name, or its position in ``tags``.

        Raises:
            KeyError: If no image has that name.
            IndexError: If the position is out of range.
        """
        if isinstance(image, int):
            index = image
            if not -len(self.tags) <= index < len(self.tags):
                raise IndexError(f"Image index {index} out of range")
        else:
            names = [tag.name for tag in self.tags]
            if image not in names:
                raise KeyError(f"Image '{image}' is not part of this selection")
            index = names.index(image)
        tags = list(self.tags)
        tags[index] = tags[index].toggled()
        return replace(self, tags=tuple(tags))

    @property
    def selected_names(self) -> list[str]:
        return [tag.name for tag in self.tags if tag.selected]

    @property
    def associated(self) -> list[ImageTag]:
        return [tag for tag in self.tags if tag.associated]

    @property
    def unassociated(self) -> list[ImageTag]:
        return [tag for tag in self.tags if not tag.associated]


def match_images(
    image_names: Iterable[str], groups: GroupedIndex, gcp_name: str
) -> ImageSelection:
    """Split uploaded images into those already tagged with a GCP and the rest.

    Images whose name appears among the GCP's records start associated and
    selected; all others start unassociated and unselected.
    """
    gcp_name = gcp_name.strip()
    selection = ImageSelection(
        gcp_name=gcp_name,
        known_images=frozenset(groups.image_names(gcp_name)),
    )
    return selection.add(image_names)


def save_selection(
    groups: GroupedIndex,
    selection: ImageSelection,
    policy: DefaultCoordinatePolicy | str = DefaultCoordinatePolicy.INHERIT_FIRST,
    id_factory: Callable[[], str] | None = None,
) -> GroupedIndex:
    """Replace a GCP's records with the selected images.

    Images that already had a record keep it unchanged. Each newly tagged image
    gets a fresh record whose world coordinates follow ``policy``; pixel
    coordinates are never copied since they only make sense in their own image.

    Returns:
        New GroupedIndex; ``groups`` is left untouched.
    """
    policy = DefaultCoordinatePolicy.parse(policy)
    make_id = id_factory or (lambda: uuid.uuid4().hex)
    existing = groups.get(selection.gcp_name)
    by_image = {p.image_name: p for p in existing if p.image_name is not None}
    template = existing[0] if existing else None

    records: list[GcpPoint] = []
    for name in selection.selected_names:
        if name in by_image:
            records.append(by_image[name])
            continue
        if policy is DefaultCoordinatePolicy.INHERIT_FIRST and template is not None:
            x, y, z = template.x, template.y, template.z
        else:
            x, y, z = None, None, 0.0
        records.append(
            GcpPoint(id=make_id(), name=selection.gcp_name, x=x, y=y, z=z, image_name=name)
        )

    logger.info(
        f"Saved {len(records)} images for GCP '{selection.gcp_name}' "
        f"(policy: {policy.value})"
    )
    return groups.with_group(selection.gcp_name, records)


def merge_group_points(
    points: Iterable[GcpPoint], groups: GroupedIndex, gcp_name: str
) -> list[GcpPoint]:
    """Fold one GCP's records from ``groups`` back into a flat point list.

    Points of other GCPs keep their positions. Records of ``gcp_name`` that are
    still in the group stay where they were, dropped ones are removed, and new
    ones are inserted right after the last position the GCP occupied (or at the
    end when it had none).
    """
    gcp_name = gcp_name.strip()
    records = groups.get(gcp_name)
    kept_ids = {p.id for p in records}

    merged: list[GcpPoint] = []
    insert_at = None
    for point in points:
        if point.name == gcp_name:
            if point.id in kept_ids:
                merged.append(point)
            insert_at = len(merged)
            continue
        merged.append(point)

    present = {p.id for p in merged}
    added = [p for p in records if p.id not in present]
    if insert_at is None:
        insert_at = len(merged)
    merged[insert_at:insert_at] = added
    return merged
