"""
Data provider clients consulted during reconciliation.
"""
from typing import List, Optional

import httpx

from medrecon.providers.base import ProviderClient
from medrecon.providers.dailymed import DailyMedProvider
from medrecon.providers.fda import (
    FDADrugsProvider,
    OpenFDAAdverseEventsProvider,
    OpenFDAEnforcementProvider,
    OpenFDALabelingProvider,
)
from medrecon.providers.local_db import LocalDatabaseProvider
from medrecon.providers.pubmed import PubMedProvider
from medrecon.providers.rxnorm import RxNormProvider
from medrecon.providers.trials import ClinicalTrialsProvider
from medrecon.providers.web import WebLookupProvider


def default_providers(client: Optional[httpx.AsyncClient] = None) -> List[ProviderClient]:
    """All registered providers, in registration order."""
    return [
        FDADrugsProvider(client=client),
        OpenFDALabelingProvider(client=client),
        OpenFDAAdverseEventsProvider(client=client),
        RxNormProvider(client=client),
        DailyMedProvider(client=client),
        ClinicalTrialsProvider(client=client),
        PubMedProvider(client=client),
        LocalDatabaseProvider(client=client),
        WebLookupProvider(client=client),
        OpenFDAEnforcementProvider(client=client),
    ]


__all__ = [
    "ProviderClient",
    "FDADrugsProvider",
    "OpenFDALabelingProvider",
    "OpenFDAAdverseEventsProvider",
    "OpenFDAEnforcementProvider",
    "RxNormProvider",
    "DailyMedProvider",
    "ClinicalTrialsProvider",
    "PubMedProvider",
    "LocalDatabaseProvider",
    "WebLookupProvider",
    "default_providers",
]
