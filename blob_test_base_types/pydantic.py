"""Base pydantic models used by the Engine API and transaction types."""

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, RootModel
from pydantic.alias_generators import to_camel

Model = TypeVar("Model", bound=BaseModel)

RootModelRootType = TypeVar("RootModelRootType")


class SerializeMixin:
    """Common `serialize` entry point for models and root models."""

    def serialize(
        self,
        mode: Literal["json", "python"],
        by_alias: bool,
        exclude_none: bool = True,
    ) -> Any:
        """
        Serialize the model.

        :param mode: `json` only produces JSON serializable types, `python` may contain
            arbitrary python objects.
        :param by_alias: Whether to use the camel case aliases for field names.
        :param exclude_none: Whether to drop fields set to `None`.
        """
        assert isinstance(self, BaseModel), f"{self.__class__.__name__} is not a model"
        return self.model_dump(mode=mode, by_alias=by_alias, exclude_none=exclude_none)


class BlobTestBaseModel(BaseModel, SerializeMixin):
    """Base model for all the models of the blob test packages."""

    pass


class BlobTestRootModel(RootModel[RootModelRootType], SerializeMixin):
    """Base root model for all the models of the blob test packages."""

    root: Any


class CopyValidateModel(BlobTestBaseModel):
    """Model that re-validates its fields when copied."""

    def copy(self: Model, **kwargs) -> Model:  # type: ignore[override]
        """Create a validated copy of the model with the given fields replaced."""
        return self.__class__(**(self.model_dump(exclude_unset=True) | kwargs))


class CamelModel(CopyValidateModel):
    """
    Model whose fields are serialized in camel case.

    A field such as `blob_gas_used` is rendered as `blobGasUsed`, the naming used by the
    Engine API and the `eth` JSON-RPC namespace.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )
