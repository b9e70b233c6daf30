"""
Verdict média - seule source de vérité sur la présence d'un clip.

PHILOSOPHIE:
- Le statut du clip est un TRI-ÉTAT: présent, absent, inconnu
- Inconnu n'est JAMAIS absent: on ne dit pas "sans clip" sans preuve
- Toute formulation liée au clip/vidéo passe par ce module

RÈGLES (ordre significatif):
1. PRESENT  → détecté, aucune suggestion de clip
2. ABSENT   → non détecté, suggestion de clip autorisée
3. UNKNOWN  → message conditionnel, jamais de suggestion de clip
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ClipStatus(str, Enum):
    """Statut tri-état du clip d'un anúncio."""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"

    @classmethod
    def from_flag(cls, flag: Optional[bool]) -> "ClipStatus":
        """Convertit True/False/None par identité (jamais par truthiness)."""
        if flag is True:
            return cls.PRESENT
        if flag is False:
            return cls.ABSENT
        return cls.UNKNOWN

    def as_flag(self) -> Optional[bool]:
        if self is ClipStatus.PRESENT:
            return True
        if self is ClipStatus.ABSENT:
            return False
        return None


ClipInput = Union[ClipStatus, bool, None]


@dataclass(frozen=True)
class MediaVerdict:
    """
    Verdict dérivé sur la mídia.

    Invariant: can_suggest_clip est vrai si et seulement si status == ABSENT.
    """
    status: ClipStatus
    can_suggest_clip: bool
    message: str
    short_message: str

    @property
    def has_clip_detected(self) -> Optional[bool]:
        return self.status.as_flag()

    def to_dict(self) -> dict:
        return {
            "hasClipDetected": self.has_clip_detected,
            "canSuggestClip": self.can_suggest_clip,
            "message": self.message,
            "shortMessage": self.short_message,
        }


def _coerce(clip: ClipInput) -> ClipStatus:
    if isinstance(clip, ClipStatus):
        return clip
    return ClipStatus.from_flag(clip)


def _absent_hint(pictures_count: int) -> str:
    if pictures_count >= 8:
        return " Imagens estão suficientes."
    if pictures_count >= 6:
        return " Considere adicionar mais imagens também."
    return " Considere adicionar mais imagens e clip."


def _unknown_hint(pictures_count: int) -> str:
    # Jamais de mention du clip: le statut n'est pas confirmé
    if pictures_count >= 8:
        return " Imagens estão boas."
    if pictures_count >= 6:
        return " Imagens estão suficientes."
    return " Considere adicionar mais imagens."


def get_media_verdict(clip: ClipInput, pictures_count: Optional[int] = None) -> MediaVerdict:
    """
    Calcule le verdict média d'un anúncio.

    Args:
        clip: ClipStatus ou drapeau tri-état (True/False/None)
        pictures_count: Nombre d'images (None = pas d'indice image)

    Returns:
        MediaVerdict cohérent avec le statut du clip.
    """
    status = _coerce(clip)

    if status is ClipStatus.PRESENT:
        return MediaVerdict(
            status=status,
            can_suggest_clip=False,
            message="O anúncio possui clip. Mídia está completa.",
            short_message="Clip presente",
        )

    if status is ClipStatus.ABSENT:
        message = "O anúncio não possui clip. Adicionar clip pode melhorar engajamento e conversão."
        if pictures_count is not None:
            message += _absent_hint(pictures_count)
        return MediaVerdict(
            status=status,
            can_suggest_clip=True,
            message=message,
            short_message="Sem clip",
        )

    message = (
        "Não foi possível confirmar via API se o anúncio possui clip. "
        "Valide no painel do Mercado Livre."
    )
    if pictures_count is not None:
        message += _unknown_hint(pictures_count)
    return MediaVerdict(
        status=ClipStatus.UNKNOWN,
        can_suggest_clip=False,
        message=message,
        short_message="Não detectável via API",
    )


@dataclass(frozen=True)
class MediaInfo:
    """Entrée média minimale transmise au plan d'action et aux explications."""
    clip_status: ClipStatus = ClipStatus.UNKNOWN
    pictures_count: Optional[int] = None

    @classmethod
    def from_flag(cls, has_clips: Optional[bool], pictures_count: Optional[int] = None) -> "MediaInfo":
        return cls(clip_status=ClipStatus.from_flag(has_clips), pictures_count=pictures_count)

    @property
    def verdict(self) -> MediaVerdict:
        return get_media_verdict(self.clip_status, self.pictures_count)


def can_affirm_no_clip(clip: ClipInput) -> bool:
    """Vrai seulement si l'absence du clip est confirmée."""
    return _coerce(clip) is ClipStatus.ABSENT


def can_affirm_has_clip(clip: ClipInput) -> bool:
    return _coerce(clip) is ClipStatus.PRESENT


def is_clip_status_known(clip: ClipInput) -> bool:
    return _coerce(clip) is not ClipStatus.UNKNOWN
