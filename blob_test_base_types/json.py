"""JSON encoding of the blob test models for the JSON-RPC wire."""

from typing import Any, AnyStr, List

from .pydantic import BlobTestBaseModel, BlobTestRootModel


def to_json(
    input: (
        BlobTestBaseModel
        | BlobTestRootModel
        | AnyStr
        | None
        | List[BlobTestBaseModel | BlobTestRootModel | AnyStr]
    ),
) -> Any:
    """
    Convert a model, or a list of them, to its JSON data representation.

    `None` is kept as `None` so that an absent parameter and an empty list remain
    distinguishable on the wire.
    """
    if input is None:
        return None
    if isinstance(input, list):
        return [to_json(item) for item in input]
    if isinstance(input, (BlobTestBaseModel, BlobTestRootModel)):
        return input.serialize(mode="json", by_alias=True)
    return str(input)
