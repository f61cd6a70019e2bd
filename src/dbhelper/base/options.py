import logging
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dbhelper.base.exceptions import UnknownConfigOption

logger = logging.getLogger(__name__)


class HelperOptions(BaseModel):
    """
    Runtime flags of a DBHelper instance.

    The fields are addressed by their external option names (the aliases),
    e.g. ``options.set("track-queries", True)``.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    track_queries: bool = Field(default=False, alias="track-queries")
    log_queries: bool = Field(default=False, alias="log-queries")
    debugging: bool = Field(default=False, alias="debugging")

    @classmethod
    def option_names(cls) -> Dict[str, str]:
        """Maps the external option names to the model field names."""
        return {
            (info.alias or name): name for name, info in cls.model_fields.items()
        }

    def _resolve(self, name: str) -> str:
        names = self.option_names()
        if name in names:
            return names[name]
        if name in names.values():
            return name

        raise UnknownConfigOption(
            "Unknown configuration option.",
            f"The option [{name}] does not exist. "
            f"Valid options are: [{', '.join(sorted(names))}].",
        )

    def set(self, name: str, value: Any) -> None:
        field_name = self._resolve(name)
        try:
            setattr(self, field_name, value)
        except ValidationError as e:
            raise UnknownConfigOption(
                "Invalid configuration option value.",
                f"The option [{name}] does not accept the value [{value!r}]: {e}",
            ) from e
        logger.debug(f"Option '{name}' set to {getattr(self, field_name)}.")

    def get(self, name: str) -> Any:
        return getattr(self, self._resolve(name))
