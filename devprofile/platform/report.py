"""
Pydantic schema for a recorded runtime report.

A report captures the raw answers a device runtime gave to capability
queries (``canPlayType`` results, globals, product info) so the profile can be
built away from the device itself.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, validator


class ProductInfoModel(BaseModel):
    is_ud_panel_supported: Optional[bool] = Field(default=None, alias="isUdPanelSupported")
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class RuntimeReport(BaseModel):
    platform: Optional[str] = None
    user_agent: str = Field(default="", alias="userAgent")
    globals: List[str] = Field(default_factory=list)
    can_play_type: Dict[str, str] = Field(default_factory=dict, alias="canPlayType")
    media_source: bool = Field(default=False, alias="mediaSource")
    product_info: Optional[ProductInfoModel] = Field(default=None, alias="productInfo")

    model_config = ConfigDict(populate_by_name=True)

    @validator("platform", pre=True)
    def _normalise_platform(cls, value: object) -> Optional[str]:
        result = str(value or "").strip().lower()
        return result or None

    @validator("can_play_type", pre=True)
    def _coerce_answers(cls, value: object) -> Dict[str, str]:
        if not value:
            return {}
        if not isinstance(value, dict):
            raise ValueError("canPlayType must map MIME strings to answers")
        answers: Dict[str, str] = {}
        for mime, answer in value.items():
            if answer is True:
                answers[str(mime)] = "probably"
            elif answer is False or answer is None:
                answers[str(mime)] = ""
            else:
                answers[str(mime)] = str(answer)
        return answers
