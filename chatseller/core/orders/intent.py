"""
Purchase intent detection.
Pattern based: decides when the order collection dialogue starts.
"""

import re


# Direct purchase phrases
PURCHASE_PATTERNS = [
    r"\bach[eè]t(?:er|e|es|ez|erai)\b",
    r"\bachat\b",
    r"\bcommand(?:er|e|es|ez|erai)\b",
    r"\bcombien\b",
    r"\bje (?:le |la |les )?prends\b",
    r"\bje vais (?:le |la |les )?prendre\b",
    r"\bje (?:le|la|les) veux\b",
    r"\bje veux (?:le|la|les|ce|cet|cette|ça|un|une|deux|trois|\d+)\b",
    r"\bje voudrais (?:acheter|commander|le|la|les|ce|cet|cette|un|une|\d+)\b",
    r"\br[ée]serv(?:er|e)\b",
    r"\bpanier\b",
    r"\bfinaliser\b",
    r"\bok pour\b",
    r"\bça m'int[ée]resse\b",
]

PURCHASE_PATTERN = re.compile("|".join(PURCHASE_PATTERNS), re.IGNORECASE)

QUANTITY_PATTERN = re.compile(
    r"\b\d+\b|\b(?:un|une|deux|trois|quatre|cinq|six|sept|huit|neuf|dix)\b",
    re.IGNORECASE,
)

AFFIRMATIVE_PATTERN = re.compile(
    r"\b(?:oui|ok|okay|d'accord|parfait|super|volontiers|yes)\b",
    re.IGNORECASE,
)


def detect_purchase_intent(text: str) -> bool:
    """
    Check if a message shows purchase intent.

    True when the message matches the purchase lexicon, or combines
    a quantity with an affirmative word ("oui, deux").
    """
    if not text:
        return False
    if PURCHASE_PATTERN.search(text):
        return True
    return bool(QUANTITY_PATTERN.search(text) and AFFIRMATIVE_PATTERN.search(text))
