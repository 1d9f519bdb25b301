from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    A single environment setting a client needs before it can talk to its backend.

    Attributes:
        env_key (str): Raw key name, prefixed by the client as <TYPE>_<ENGINE>_<KEY>.
        val_type (str): Expected value type: "string", "number" or "bool".
        default (str | int | bool | None): Fallback value. None marks the setting as required.
    """

    env_key: str
    val_type: str
    default: str | int | bool | None = None
