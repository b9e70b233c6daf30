"""
SuperSeller Media Module
========================

Verdict tri-état sur le clip (présent / absent / inconnu).
"""

from .media_verdict import (
    ClipStatus,
    MediaVerdict,
    MediaInfo,
    get_media_verdict,
    can_affirm_no_clip,
    can_affirm_has_clip,
    is_clip_status_known,
)

__all__ = [
    "ClipStatus",
    "MediaVerdict",
    "MediaInfo",
    "get_media_verdict",
    "can_affirm_no_clip",
    "can_affirm_has_clip",
    "is_clip_status_known",
]
