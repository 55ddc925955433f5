"""Module library payload parsers: modules, test cases and reorder lists."""

from qa_checklist.core.exceptions import ValidationError
from qa_checklist.models.project import PRIORITIES
from qa_checklist.validation.fields import _MISSING, FieldReader, is_uuid

MAX_TAGS = 10
MAX_TAG_LENGTH = 50


def _tags(reader):
    raw = reader._raw("tags")
    if raw is _MISSING or raw is None:
        return
    if not isinstance(raw, list):
        reader.errors["tags"] = "Tags must be a list of strings"
        return
    if len(raw) > MAX_TAGS:
        reader.errors["tags"] = f"At most {MAX_TAGS} tags are allowed"
        return
    tags = []
    for tag in raw:
        if not isinstance(tag, str) or not tag.strip():
            reader.errors["tags"] = "Tags must be non-empty strings"
            return
        tag = tag.strip()
        if len(tag) > MAX_TAG_LENGTH:
            reader.errors["tags"] = f"Each tag must be at most {MAX_TAG_LENGTH} characters"
            return
        if tag not in tags:
            tags.append(tag)
    reader.clean["tags"] = tags


def parse_module(data, partial=False):
    r = FieldReader(data, partial=partial)
    r.string("name", label="Module name", required=True, max_len=255)
    r.string("description", label="Description", max_len=1000)
    r.string("thumbnail_url", label="Thumbnail URL", max_len=1000)
    r.string("thumbnail_file_name", label="Thumbnail file name", max_len=255)
    r.integer("order_index", label="Order index", minimum=0)
    _tags(r)
    if not partial:
        r.string("created_by", label="Created by", max_len=255)
    return r.result()


def parse_testcase(data, partial=False):
    r = FieldReader(data, partial=partial)
    r.string("title", label="Test case title", required=True, max_len=255)
    r.string("description", label="Description", max_len=1000)
    r.choice("priority", PRIORITIES, label="Priority", default="Medium")
    r.string("image_url", label="Image URL", max_len=1000)
    return r.result()


def parse_reorder(data, key="ids"):
    """Normalise a reorder payload into an ordered list of ids.

    Accepted shapes (bare list or wrapped under ``key``, ``items``,
    ``modules`` or ``testCases``):
        ["id3", "id1", "id2"]
        [{"id": "id3", "order_index": 0}, {"id": "id1", "orderIndex": 1}]

    Objects are sorted by their index; objects without one keep list order.
    """
    payload = data
    if isinstance(data, dict):
        payload = None
        for candidate in (key, "items", "modules", "testCases", "test_cases", "ids"):
            if candidate in data:
                payload = data[candidate]
                break
    if not isinstance(payload, list):
        raise ValidationError("Invalid reorder payload", details={key: "Must be a list of ids"})

    entries = []
    for position, entry in enumerate(payload):
        if isinstance(entry, dict):
            item_id = entry.get("id")
            index = entry.get("order_index", entry.get("orderIndex", position))
        else:
            item_id, index = entry, position
        if not is_uuid(item_id):
            raise ValidationError("Invalid reorder payload", details={key: "Every id must be a valid UUID"})
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise ValidationError("Invalid reorder payload", details={key: "order_index must be a non-negative integer"})
        entries.append((index, position, item_id))

    entries.sort()
    return [item_id for _, _, item_id in entries]
