"""
NFT metadata assembly and parsing.

``assemble`` turns upload form fields into the canonical metadata document
that gets stored and referenced by a mint; ``parse_metadata`` is the reader
side and refuses documents from a newer schema.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import pydantic

from .contracts.c32 import is_valid_address
from .exceptions import DecodeError, UnsupportedSchemaVersion, ValidationError
from .models import DEFAULT_LICENSE, SCHEMA_VERSION, Attribute, MediaType, NFTMetadata
from .utils import strip_ipfs_prefix, to_ipfs_uri

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "description", "image_cid", "creator", "media_type")
OPTIONAL_FIELDS = (
    "animation_cid", "attributes", "license", "media_specific", "components", "created_at",
)


def _is_principal(value: str) -> bool:
    address, sep, name = value.partition(".")
    return is_valid_address(address) and (not sep or bool(name))


def _error(field: str, message: str) -> Dict[str, str]:
    return {"field": field, "message": message}


def _parse_attributes(raw: Any, errors: List[Dict[str, str]]) -> List[Attribute]:
    if not isinstance(raw, (list, tuple)):
        errors.append(_error("attributes", "must be a list of {trait_type, value} entries"))
        return []
    attributes = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            errors.append(_error(f"attributes[{index}]", "must be a mapping"))
            continue
        trait = item.get("trait_type", item.get("trait"))
        if not isinstance(trait, str) or not trait.strip():
            errors.append(_error(f"attributes[{index}]", "trait_type is required"))
            continue
        if "value" not in item:
            errors.append(_error(f"attributes[{index}]", "value is required"))
            continue
        attributes.append(Attribute(trait=trait.strip(), value=item["value"]))
    return attributes


def _parse_created_at(raw: Any, errors: List[Dict[str, str]]) -> Optional[datetime]:
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if isinstance(raw, str):
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            errors.append(_error("created_at", "must be an ISO-8601 timestamp"))
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    errors.append(_error("created_at", "must be a datetime or ISO-8601 string"))
    return None


def assemble(fields: Mapping[str, Any], now: Optional[datetime] = None) -> NFTMetadata:
    """
    Build a metadata document from upload fields.

    Args:
        fields: name, description, image_cid, creator and media_type are
            required; animation_cid, attributes, license, media_specific,
            components and created_at are optional
        now: Timestamp to use when created_at is not supplied

    Returns:
        The metadata document, ready for ``ContentStore.put_json``

    Raises:
        ValidationError: Listing every missing or invalid field
    """
    errors: List[Dict[str, str]] = []

    for key in sorted(set(fields) - set(REQUIRED_FIELDS) - set(OPTIONAL_FIELDS)):
        errors.append(_error(key, "unexpected field"))

    values: Dict[str, str] = {}
    for key in REQUIRED_FIELDS:
        raw = fields.get(key)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            errors.append(_error(key, "is required"))
        elif not isinstance(raw, str):
            errors.append(_error(key, "must be a string"))
        else:
            values[key] = raw.strip()

    if "image_cid" in values:
        values["image_cid"] = strip_ipfs_prefix(values["image_cid"])
        if not values["image_cid"]:
            errors.append(_error("image_cid", "is required"))

    if "creator" in values and not _is_principal(values["creator"]):
        errors.append(_error("creator", "must be a Stacks principal"))

    media_type = None
    if "media_type" in values:
        try:
            media_type = MediaType(values["media_type"].lower())
        except ValueError:
            allowed = ", ".join(m.value for m in MediaType)
            errors.append(_error("media_type", f"must be one of: {allowed}"))

    animation_url = None
    animation = fields.get("animation_cid")
    if animation is not None:
        if not isinstance(animation, str) or not strip_ipfs_prefix(animation.strip()):
            errors.append(_error("animation_cid", "must be a non-empty identifier"))
        else:
            animation_url = to_ipfs_uri(animation.strip())

    attributes = _parse_attributes(fields.get("attributes", []), errors)

    license_ = fields.get("license", DEFAULT_LICENSE)
    if license_ is None:
        license_ = DEFAULT_LICENSE
    if not isinstance(license_, str) or not license_.strip():
        errors.append(_error("license", "must be a non-empty string"))

    media_specific = fields.get("media_specific")
    if media_specific is not None and not isinstance(media_specific, Mapping):
        errors.append(_error("media_specific", "must be a mapping"))

    components = fields.get("components")
    if components is not None:
        if not isinstance(components, (list, tuple)) or not all(isinstance(c, Mapping) for c in components):
            errors.append(_error("components", "must be a list of mappings"))

    created_at = None
    if fields.get("created_at") is not None:
        created_at = _parse_created_at(fields["created_at"], errors)

    if errors:
        raise ValidationError(errors)

    return NFTMetadata(
        name=values["name"],
        description=values["description"],
        image=to_ipfs_uri(values["image_cid"]),
        animation_url=animation_url,
        media_type=media_type,
        attributes=attributes,
        creator=values["creator"],
        license=license_.strip(),
        created_at=created_at or now or datetime.now(timezone.utc),
        schema_version=SCHEMA_VERSION,
        media_specific=dict(media_specific) if media_specific is not None else None,
        components=[dict(c) for c in components] if components is not None else None,
    )


def parse_metadata(document: Any) -> NFTMetadata:
    """
    Read a stored metadata document.

    Raises:
        UnsupportedSchemaVersion: If the document is from a newer schema
        DecodeError: If the document is not valid metadata
    """
    if not isinstance(document, Mapping):
        raise DecodeError(f"Metadata document must be a JSON object, got {type(document).__name__}")

    version = document.get("version")
    if isinstance(version, bool) or not isinstance(version, int):
        raise DecodeError(f"Metadata document has no integer schema version: {version!r}")
    if version > SCHEMA_VERSION:
        logger.warning(f"Refusing metadata with schema version {version} (supported: {SCHEMA_VERSION})")
        raise UnsupportedSchemaVersion(version, SCHEMA_VERSION)

    try:
        return NFTMetadata.model_validate(dict(document))
    except pydantic.ValidationError as e:
        raise DecodeError(f"Invalid metadata document: {e}") from e
