import re

from pydantic import BaseModel, field_validator


class RenderConfig(BaseModel):
    """
    Options for one rendering pass.

    `root` is False for the detached renders that produce tooltip captions:
    those write neither document boilerplate nor line containers.
    """

    stylesheet: str = "../assets/isabelle.css"
    code_class: str = "isabelle-code"
    root: bool = True
    symbol_tooltips: bool = True

    @field_validator("stylesheet")
    @classmethod
    def stylesheet_must_be_set(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("stylesheet must not be empty")
        return v

    @field_validator("code_class")
    @classmethod
    def code_class_must_be_token(cls, v: str) -> str:
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_-]*", v):
            raise ValueError(f"{v!r} is not a CSS class name")
        return v

    def nested(self) -> "RenderConfig":
        return self.model_copy(update={"root": False, "symbol_tooltips": False})
