"""
Provider Registry

Names, display labels, reliability weights and resolution priority of the data
providers consulted during reconciliation.
"""

FDA_DRUGS = "fda_drugs"
OPENFDA_LABELING = "openfda_labeling"
OPENFDA_ADVERSE_EVENTS = "openfda_adverse_events"
OPENFDA_ENFORCEMENT = "openfda_enforcement"
RXNORM = "rxnorm"
DAILYMED = "dailymed"
CLINICAL_TRIALS = "clinical_trials"
PUBMED = "pubmed"
LOCAL_DATABASE = "local_database"
WEB_LOOKUP = "web_lookup"

DISPLAY_NAMES = {
    FDA_DRUGS: "FDA Drugs@FDA",
    OPENFDA_LABELING: "OpenFDA Labeling",
    OPENFDA_ADVERSE_EVENTS: "OpenFDA Adverse Events",
    OPENFDA_ENFORCEMENT: "OpenFDA Enforcement",
    RXNORM: "RxNorm",
    DAILYMED: "DailyMed",
    CLINICAL_TRIALS: "ClinicalTrials.gov",
    PUBMED: "PubMed",
    LOCAL_DATABASE: "Local Database",
    WEB_LOOKUP: "Web Scraped",
}

# Source reliability weights (1-10 scale)
SOURCE_RELIABILITY = {
    FDA_DRUGS: 10,
    OPENFDA_LABELING: 10,
    DAILYMED: 9,
    RXNORM: 8,
    OPENFDA_ADVERSE_EVENTS: 8,
    OPENFDA_ENFORCEMENT: 8,
    CLINICAL_TRIALS: 7,
    PUBMED: 7,
    LOCAL_DATABASE: 5,
    WEB_LOOKUP: 4,
}

DEFAULT_RELIABILITY = 5

# Conflict resolution order: regulatory sources first, unstructured web data last.
# Enforcement reports are not ranked.
PROVIDER_PRIORITY = [
    FDA_DRUGS,
    OPENFDA_LABELING,
    OPENFDA_ADVERSE_EVENTS,
    RXNORM,
    DAILYMED,
    CLINICAL_TRIALS,
    PUBMED,
    LOCAL_DATABASE,
    WEB_LOOKUP,
]


def priority_rank(provider: str) -> int:
    """Position in PROVIDER_PRIORITY; unranked providers sort last."""
    try:
        return PROVIDER_PRIORITY.index(provider)
    except ValueError:
        return len(PROVIDER_PRIORITY)
