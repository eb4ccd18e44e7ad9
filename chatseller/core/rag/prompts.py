"""
Prompts for the sales agent.
Persona, grounding rules, greeting directive and order collection instructions.
"""

import re
from typing import Optional

from chatseller.core.models import Persona, format_price
from chatseller.core.orders.models import OrderCollectionState

# Openers a continuing conversation must never start with
GREETING_TOKENS = [
    "Bonjour", "Bonsoir", "Hello", "Salut", "Coucou", "Bienvenue", "Ravie", "Enchantée",
]

GREETING_PATTERN = re.compile(
    r"^\s*(?:" + "|".join(re.escape(token) for token in GREETING_TOKENS) + r")\b[\s,!.\-–—]*",
    re.IGNORECASE,
)


SALES_PROMPT = """Tu es {name}, {title} pour {brand}. Tu es une vraie vendeuse experte, pas un assistant IA. Ton objectif : comprendre le besoin du client, recommander les bons produits et le guider vers l'achat.

## CATALOGUE ET CONNAISSANCES {brand_upper}

{context}

## EXPERTISE BEAUTÉ

**Ingrédients africains :** karité (hydratation intense), bissap/hibiscus (stimulant capillaire, antioxydant), baobab (vitamine C, anti-âge), moringa (antioxydants), ricin noir (croissance capillaire), neem (antibactérien, anti-acné), fenugrec (renforce la racine), savon noir (nettoyant purifiant).

**Actifs cosmétiques :** rétinol (anti-âge, soir + SPF), niacinamide (anti-taches, pores), vitamine C (éclat, matin), acide hyaluronique (hydratation), AHA/glycolique (exfoliation + SPF), BHA/salicylique (acné, points noirs).

**Problématiques fréquentes :** hyperpigmentation, mélasma, sécheresse cutanée, cheveux crépus 4A/4B/4C, casse capillaire, alopécie de traction.

## RÈGLES ABSOLUES

1. **Produits** : Recommande UNIQUEMENT des produits du catalogue ci-dessus. Si aucun ne correspond, dis-le franchement.
2. **Vérité** : N'invente jamais un produit, un prix ou un résultat. Si tu ne sais pas : "Je me renseigne auprès de l'équipe."
3. **Patch test** : Mentionne-le pour les actifs forts (rétinol, AHA, BHA, vitamine C concentrée).
4. **SPF** : Rappelle la protection solaire avec les actifs photosensibilisants.
5. **Médical** : Condition sérieuse, recommande un dermatologue.
6. **Cohérence** : Ne redemande jamais une information déjà donnée.

## RÈGLE CRITIQUE — SALUTATIONS

{greeting_directive}

## GUIDE DE VENTE

**1. Écouter** : identifier le besoin (type de peau ou de cheveux, problématique).
**2. Recommander visuellement** : dès que tu identifies un produit adapté, utilise le tool `recommend_product` pour l'afficher sous forme de carte avec image et prix.
**3. Guider vers l'achat** : après avoir montré un produit, invite le client à le commander.{upsell}
**4. Ajouter au panier** : quand le client dit "ajoutez aussi...", "je prends aussi...", "mettez dans mon panier", utilise le tool `add_to_cart`.
**5. Rassurer** : donne une timeline réaliste ("résultats visibles en 4-6 semaines") et lève les doutes.{urgency}

**Si aucun produit ne correspond :** "Je n'ai pas de produit spécifiquement formulé pour [besoin], mais [produit proche] pourrait aider grâce à [ingrédient]."

**Situations spécifiques :**
- Grossesse/allaitement : déconseiller rétinol et acides forts, orienter vers les produits doux
- Allergie : vérifier les ingrédients, rappeler le patch test
- Budget limité : prioriser l'essentiel, construire la routine progressivement
{specific_instructions}
## STYLE

Ton : {personality}. Adapte-toi au registre du client (tutoiement ou vouvoiement). Phrases courtes et naturelles, comme une vraie conversation. Maximum 1 émoji par message. Valorise les ingrédients africains."""

FIRST_MESSAGE_DIRECTIVE = 'Cette conversation COMMENCE. Commence ta réponse par : "{welcome}"'

CONTINUATION_DIRECTIVE = """**INTERDIT DE SALUER.** La conversation est DÉJÀ en cours et le client te connaît déjà.
NE COMMENCE JAMAIS ta réponse par {tokens} ou toute autre forme de salutation.
Commence DIRECTEMENT par ta réponse au message du client. Exemple : "Pour tes cheveux crépus, je te recommande..." """

UPSELL_HINT = " Propose aussi un produit complémentaire (cross-sell)."

URGENCY_HINT = "\n**6. Urgence** : signale honnêtement les stocks limités ou les offres en cours, sans jamais les inventer."

DEFAULT_WELCOME = "Bonjour ! Je suis {name}, votre {title}. Comment puis-je vous aider aujourd'hui ?"


def build_welcome_message(persona: Persona) -> str:
    """Configured welcome message, or the default one built from the persona."""
    if persona.welcome_message and persona.welcome_message.strip():
        return persona.welcome_message.strip()
    return DEFAULT_WELCOME.format(
        name=persona.name,
        title=(persona.title or "conseillère").lower(),
    )


def build_sales_prompt(
    persona: Persona,
    context: str,
    shop_name: Optional[str],
    is_first_message: bool,
) -> str:
    """
    Build the system prompt for a turn.

    Args:
        persona: Agent identity and options
        context: Retrieval context, inserted verbatim
        shop_name: Shop (brand) name
        is_first_message: True if the conversation has no prior turn

    Returns:
        System prompt
    """
    brand = shop_name or "notre marque"
    config = persona.config

    if is_first_message:
        greeting_directive = FIRST_MESSAGE_DIRECTIVE.format(
            welcome=build_welcome_message(persona)
        )
    else:
        greeting_directive = CONTINUATION_DIRECTIVE.format(
            tokens=", ".join(f'"{token}"' for token in GREETING_TOKENS)
        )

    specific = ""
    if config.specific_instructions:
        specific = f"\n## INSTRUCTIONS DE LA BOUTIQUE\n\n{config.specific_instructions.strip()}\n"

    return SALES_PROMPT.format(
        name=persona.name,
        title=persona.title,
        brand=brand,
        brand_upper=brand.upper(),
        context=context,
        greeting_directive=greeting_directive,
        upsell=UPSELL_HINT if config.upsell_enabled else "",
        urgency=URGENCY_HINT if config.urgency_enabled else "",
        specific_instructions=specific,
        personality=persona.personality,
    )


def starts_with_greeting(text: str) -> bool:
    """Check if a reply opens with a greeting token."""
    return bool(GREETING_PATTERN.match(text or ""))


def strip_leading_greeting(text: str) -> str:
    """Remove a leading greeting from a reply, keeping the rest intact."""
    stripped = text or ""
    while starts_with_greeting(stripped):
        stripped = GREETING_PATTERN.sub("", stripped, count=1)
    stripped = stripped.lstrip()
    if not stripped:
        return text
    return stripped[0].upper() + stripped[1:]


ORDER_FIELD_LABELS = [
    ("product_name", "Produit"),
    ("quantity", "Quantité"),
    ("customer_phone", "Téléphone"),
    ("customer_name", "Nom"),
    ("customer_address", "Adresse"),
    ("payment_method", "Paiement"),
]

ORDER_COLLECTION_PROMPT = """
## COMMANDE EN COURS

Le client est en train de passer commande. Étape actuelle : {step}.

Informations déjà collectées :
{collected}

Pose UNIQUEMENT cette question, sans redemander les informations déjà données :
{question}"""


def build_order_collection_instructions(
    state: OrderCollectionState,
    question: str,
    currency: str,
) -> str:
    """
    Instructions appended to the system prompt while an order is collected.

    Args:
        state: Current collection state
        question: The single outstanding question (or the confirmation summary)
        currency: Currency label for the product price

    Returns:
        Prompt section
    """
    data = state.data
    lines = []
    for attribute, label in ORDER_FIELD_LABELS:
        value = getattr(data, attribute)
        if not value:
            continue
        if attribute == "product_name" and data.product_price is not None:
            value = f"{value} ({format_price(data.product_price)} {currency})"
        lines.append(f"- {label} : {value}")

    return ORDER_COLLECTION_PROMPT.format(
        step=state.step.value,
        collected="\n".join(lines) if lines else "- Aucune",
        question=question,
    )
