"""Mapping policy between YouTube's category taxonomy and our niches.

The mapping is lossy and many-to-one (Education lands in AI, News & Politics
in Business). Both directions are read from settings so deployments can
replace the tables without touching code.
"""

from typing import Dict, List, Optional, Union

from .settings import get_settings
from ..models.video_models import Niche, ALL_NICHES

# Fixed order used by the multi-niche views
DEFAULT_NICHES: List[Niche] = [
    Niche.ENTERTAINMENT,
    Niche.SPORTS,
    Niche.BUSINESS,
    Niche.AI,
    Niche.SCIENCE,
]


class NicheMapper:
    """Resolves YouTube category ids to niches and back"""

    def __init__(
        self,
        category_to_niche: Optional[Dict[str, str]] = None,
        niche_to_category: Optional[Dict[str, str]] = None,
        default_niche: Optional[Union[Niche, str]] = None
    ):
        settings = get_settings()
        table = category_to_niche if category_to_niche is not None else settings.category_niche_map
        self.category_to_niche = {str(k).strip(): Niche(v) for k, v in table.items()}

        table = niche_to_category if niche_to_category is not None else settings.niche_category_map
        self.niche_to_category = {Niche(k): str(v) for k, v in table.items()}

        self.default_niche = Niche(default_niche or settings.default_niche)

    def niche_for_category(self, category_id: Optional[Union[str, int]]) -> Niche:
        """Niche for a YouTube category id; unknown or missing ids get the default."""
        if category_id is None:
            return self.default_niche
        key = str(category_id).strip()
        # "017" and "17" are the same category
        if key.isdigit():
            key = str(int(key))
        return self.category_to_niche.get(key, self.default_niche)

    def category_for_niche(self, niche: Optional[Union[Niche, str]]) -> Optional[str]:
        """Search category id for a niche; None means no constraint."""
        if niche is None or niche == ALL_NICHES:
            return None
        try:
            return self.niche_to_category.get(Niche(niche))
        except ValueError:
            return None


def parse_niche(value: Union[Niche, str]) -> Union[Niche, str]:
    """
    Normalize user input to a Niche or the ``All`` pseudo niche.

    Matching is case-insensitive. Raises ValueError for anything else.
    """
    if isinstance(value, Niche):
        return value
    text = str(value).strip()
    if text.lower() == ALL_NICHES.lower():
        return ALL_NICHES
    for niche in Niche:
        if niche.value.lower() == text.lower():
            return niche
    raise ValueError(f"Unknown niche '{value}'. Expected one of: "
                     f"{', '.join(n.value for n in Niche)}, {ALL_NICHES}")
