"""
Field extractors for the order collection steps.
Each extractor returns the fields it found, or an empty dict on a miss.
"""

import re
from typing import Optional

from chatseller.core.orders.models import OrderStep, PaymentMethod


AFFIRMATIVE_PATTERN = re.compile(
    r"^\s*(?:oui|ouais|ok|okay|d'accord|dac|parfait|exact|exactement|correct|c'est bon|"
    r"c'est correct|c'est parfait|tout est bon|je confirme|confirm[ée]?|valid[ée]?|"
    r"yes|go|allons-y|volontiers|bien s[uû]r)\b",
    re.IGNORECASE,
)

NEGATIVE_PATTERN = re.compile(
    r"^\s*(?:non|nan|no|pas d'accord|pas correct|ce n'est pas bon)\b|\bannul\w*",
    re.IGNORECASE,
)

CANCEL_PATTERN = re.compile(
    r"\bannul(?:e|er|ez)\b|\bje ne veux plus\b|\blaisse tomber\b|\bstop la commande\b",
    re.IGNORECASE,
)

PICKUP_PATTERN = re.compile(
    r"\bretrait\b|\bretirer\b|\ben (?:magasin|boutique)\b|\bau magasin\b|\bsur place\b|"
    r"\bje (?:passe|viens|viendrai) (?:le |la |les )?(?:r[ée]cup[ée]rer|chercher)\b",
    re.IGNORECASE,
)


def is_affirmative(text: str) -> bool:
    """Check if a reply opens with a yes."""
    return bool(AFFIRMATIVE_PATTERN.search(text or "")) and not NEGATIVE_PATTERN.search(text or "")


def is_negative(text: str) -> bool:
    """Check if a reply is a no or asks to cancel."""
    return bool(NEGATIVE_PATTERN.search(text or ""))


def is_cancel_request(text: str) -> bool:
    """Check if the shopper explicitly abandons the order."""
    return bool(CANCEL_PATTERN.search(text or ""))


def mentions_pickup(text: str) -> bool:
    """Check if the shopper wants to collect the order in store."""
    return bool(PICKUP_PATTERN.search(text or ""))


class QuantityExtractor:
    """Extract a quantity from digits or French number words."""

    # Prices are not quantities: "15 000 FCFA", "8.500", "6000 F"
    DIGITS_PATTERN = re.compile(
        r"(?<![\d+])(?<!\d[\s.])(\d{1,3})(?!\d)(?![\s.]\d{3}\b)"
        r"(?!\s*(?:(?:f?cfa|xof|francs?|eur(?:os?)?|f)\b|€|\$))",
        re.IGNORECASE,
    )

    NUMBER_WORDS = {
        "un": 1, "une": 1, "deux": 2, "trois": 3, "quatre": 4, "cinq": 5,
        "six": 6, "sept": 7, "huit": 8, "neuf": 9, "dix": 10, "onze": 11,
        "douze": 12, "quinze": 15, "vingt": 20,
    }

    WORDS_PATTERN = re.compile(
        r"\b(" + "|".join(sorted(NUMBER_WORDS, key=len, reverse=True)) + r")\b",
        re.IGNORECASE,
    )

    @classmethod
    def extract(cls, text: str) -> dict:
        candidates = []

        match = cls.DIGITS_PATTERN.search(text)
        if match:
            candidates.append((match.start(), int(match.group(1))))

        match = cls.WORDS_PATTERN.search(text)
        if match:
            candidates.append((match.start(), cls.NUMBER_WORDS[match.group(1).lower()]))

        if not candidates:
            return {}

        # The first number in the message wins
        _, quantity = min(candidates)
        if quantity < 1:
            return {}
        return {"quantity": quantity}


class PhoneExtractor:
    """Extract a phone number, returned as digits only."""

    MIN_DIGITS = 8

    PHONE_PATTERN = re.compile(r"\+?\(?\d[\d\s.\-()]*\d")

    @classmethod
    def extract(cls, text: str) -> dict:
        for match in cls.PHONE_PATTERN.finditer(text):
            digits = re.sub(r"\D", "", match.group(0))
            if len(digits) >= cls.MIN_DIGITS:
                return {"customer_phone": digits}
        return {}


class NameExtractor:
    """Extract first and last name, dropping filler words."""

    FILLER_WORDS = {
        "je", "m'appelle", "appelle", "suis", "moi", "c'est", "mon", "ma",
        "nom", "prénom", "prenom", "est", "voici", "bonjour", "bonsoir", "salut", "merci",
        "oui", "ok", "alors", "et", "le", "la", "madame", "monsieur", "mme", "mr", "mlle",
        "m", "moi-même", "s'appelle", "complet",
    }

    WORD_PATTERN = re.compile(r"[^\W\d_][\w'’.\-]*", re.UNICODE)

    @classmethod
    def extract(cls, text: str) -> dict:
        words = [
            w.strip(".-'’") for w in cls.WORD_PATTERN.findall(text)
        ]
        words = [
            w for w in words
            if w and w.lower().replace("’", "'") not in cls.FILLER_WORDS
        ]
        if not words:
            return {}

        words = [w[:1].upper() + w[1:] for w in words]
        result = {"customer_first_name": words[0]}
        if len(words) > 1:
            result["customer_last_name"] = " ".join(words[1:])
        return result


class AddressExtractor:
    """Extract a delivery address, stripping leading filler phrases."""

    MIN_LENGTH = 3

    FILLER_PATTERN = re.compile(
        r"^\s*(?:"
        r"mon adresse (?:est|c'est)|l'adresse (?:est|c'est)|adresse\s*:|"
        r"j'habite|je vis|je réside|je suis|je reste|"
        r"livrez(?:-moi)?|livrer|livraison|"
        r"c'est|à|a|au|aux"
        r")(?![\w'])[\s:,]*",
        re.IGNORECASE,
    )

    @classmethod
    def extract(cls, text: str) -> dict:
        address = text.strip().replace("’", "'")
        previous = None
        while previous != address:
            previous = address
            address = cls.FILLER_PATTERN.sub("", address, count=1).strip()

        address = address.strip(" .,;:!")
        if len(address) < cls.MIN_LENGTH or not re.search(r"[^\W\d_]", address):
            return {}
        if is_affirmative(address) or is_negative(address):
            return {}
        return {"customer_address": address}


class PaymentExtractor:
    """Map a free-text answer to a canonical payment method."""

    # Checked in order: "carte bancaire" must hit card before bank transfer
    METHOD_KEYWORDS = [
        (PaymentMethod.PICKUP, ["retrait", "magasin", "boutique", "sur place"]),
        (PaymentMethod.MOBILE_MONEY, ["mobile", "money", "momo", "orange", "wave", "moov", "mtn", "flooz"]),
        (PaymentMethod.CARD, ["carte", "visa", "mastercard", "cb"]),
        (PaymentMethod.BANK_TRANSFER, ["virement", "banque", "bancaire"]),
        (PaymentMethod.CASH_ON_DELIVERY, ["livraison", "cash", "espèces", "especes", "liquide", "réception"]),
    ]

    @classmethod
    def extract(cls, text: str) -> dict:
        lower = text.lower().strip()
        if not lower:
            return {}

        for method, keywords in cls.METHOD_KEYWORDS:
            if any(re.search(rf"\b{re.escape(k)}\b", lower) for k in keywords):
                return {"payment_method": method}

        if is_affirmative(lower) or is_negative(lower):
            return {}
        return {"payment_method": text.strip()}


class ConfirmationExtractor:
    """Read a yes or a no to the order summary."""

    @classmethod
    def extract(cls, text: str) -> dict:
        if is_negative(text):
            return {"confirmed": False}
        if is_affirmative(text):
            return {"confirmed": True}
        return {}


EXTRACTORS = {
    OrderStep.QUANTITY: QuantityExtractor,
    OrderStep.PHONE: PhoneExtractor,
    OrderStep.NAME: NameExtractor,
    OrderStep.ADDRESS: AddressExtractor,
    OrderStep.PAYMENT: PaymentExtractor,
    OrderStep.CONFIRMATION: ConfirmationExtractor,
}


def extract(step: OrderStep, text: Optional[str]) -> dict:
    """Run the extractor of a step on a message."""
    extractor = EXTRACTORS.get(step)
    if extractor is None or not text:
        return {}
    return extractor.extract(text)
