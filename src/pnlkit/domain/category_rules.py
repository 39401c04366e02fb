"""Classification tables mapping ledger labels to summary buckets.

Rules are evaluated in a fixed priority order:

1. the category table (parent categories of the chart of accounts),
2. the subcategory table (detail ledger accounts),
3. the sign of the amount (unclassified revenue or unclassified costs).

Within a table exact rules come before prefix rules and the first match wins.
Matching is case-insensitive and ignores surrounding whitespace.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from pnlkit.domain.entities import (
    BucketId,
    CategoryRule,
    LineItem,
    MatchField,
    MatchKind,
    RollupPolicy,
)


def _rules(
    match_field: MatchField,
    kind: MatchKind,
    bucket: BucketId,
    patterns: Iterable[str],
    group: Optional[str] = None,
) -> tuple[CategoryRule, ...]:
    return tuple(
        CategoryRule(
            match_field=match_field,
            kind=kind,
            pattern=pattern,
            bucket=bucket,
            group=group,
        )
        for pattern in patterns
    )


def _category(bucket: BucketId, *patterns: str, group: Optional[str] = None):
    return _rules(MatchField.CATEGORY, MatchKind.EXACT, bucket, patterns, group)


def _subcategory(bucket: BucketId, *patterns: str, group: Optional[str] = None):
    return _rules(MatchField.SUBCATEGORY, MatchKind.EXACT, bucket, patterns, group)


def _subcategory_prefix(bucket: BucketId, *patterns: str, group: Optional[str] = None):
    return _rules(MatchField.SUBCATEGORY, MatchKind.PREFIX, bucket, patterns, group)


# Parent categories (RGS level 3). "Netto-omzet" is shared by food and
# beverage revenue and is split by subcategory instead.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    *_category(
        BucketId.REVENUE_PRODUCED_GOODS,
        "Netto-omzet uit leveringen geproduceerde goederen",
        group="food",
    ),
    *_category(
        BucketId.REVENUE_MERCHANDISE,
        "Netto-omzet uit verkoop van handelsgoederen",
        group="beverage",
    ),
    # Group totals of the revenue lines above
    *_category(BucketId.ROLLUP_EXCLUDED, "Netto-omzet groepen"),
    *_category(
        BucketId.COST_OF_SALES,
        "Inkoopwaarde handelsgoederen",
        "Kostprijs van de omzet",
    ),
    *_category(
        BucketId.LABOR,
        "Lasten uit hoofde van personeelsbeloningen",
        "Lonen en salarissen",
        "Arbeidskosten",
    ),
    *_category(BucketId.OTHER_COSTS, "Huisvestingskosten", group="housing"),
    *_category(BucketId.OTHER_COSTS, "Exploitatie- en machinekosten", group="operating"),
    *_category(BucketId.OTHER_COSTS, "Verkoop gerelateerde kosten", group="sales"),
    *_category(BucketId.OTHER_COSTS, "Autokosten", group="car"),
    *_category(BucketId.OTHER_COSTS, "Kantoorkosten", group="office"),
    *_category(BucketId.OTHER_COSTS, "Assurantiekosten", group="insurance"),
    *_category(BucketId.OTHER_COSTS, "Accountants- en advieskosten", group="accounting"),
    *_category(BucketId.OTHER_COSTS, "Administratieve lasten", group="administrative"),
    *_category(BucketId.OTHER_COSTS, "Andere kosten", group="other"),
    *_category(BucketId.OTHER_COSTS, "Overige bedrijfskosten"),
    *_category(
        BucketId.DEPRECIATION,
        "Afschrijvingen op immateriële en materiële vaste activa",
        "Afschrijvingen op immateriële vaste activa",
        "Afschrijvingen op materiële vaste activa",
    ),
    *_category(BucketId.FINANCIAL_RESULT, "Financiële baten en lasten", group="interest"),
    *_category(
        BucketId.FINANCIAL_RESULT,
        "Opbrengst van vorderingen die tot de vaste activa behoren en van effecten",
        group="receivables",
    ),
)


# Detail ledger accounts (Grootboek).
SUBCATEGORY_RULES: tuple[CategoryRule, ...] = (
    *_subcategory(
        BucketId.REVENUE_PRODUCED_GOODS,
        "Omzet snacks (btw laag)",
        "Verkopen snacks (btw laag)",
        "Omzet lunch (btw laag)",
        "Omzet diner (btw laag)",
        "Omzet menu's (btw laag)",
        "Omzet keuken overig (btw laag)",
        group="food",
    ),
    *_subcategory(
        BucketId.REVENUE_MERCHANDISE,
        "Omzet wijnen (btw hoog)",
        "Omzet gedestilleerd (btw hoog)",
        "Omzet cocktails (btw hoog)",
        "Omzet cider (btw hoog)",
        "Omzet hoog overig (btw hoog)",
        "Omzet hoog alcoholische warme dranken (btw hoog)",
        "Omzet speciaalbier fles (btw hoog)",
        "Omzet speciaalbier tap (btw hoog)",
        "Omzet tap pilsner (btw hoog)",
        "Omzet koffie / thee (btw laag)",
        "Verkopen koffie/thee(btw laag)",
        "Omzet frisdranken (btw laag)",
        "Omzet frisdtranken (btw laag)",
        "Omzet alcohol vrij (btw laag)",
        "Omzet alcohol virj (btw laag)",
        "Omzet laag overig (btw laag)",
        "Omzet non food (btw hoog)",
        group="beverage",
    ),
    *_subcategory(
        BucketId.COST_OF_SALES,
        "Inkopen keuken (btw hoog)",
        "Inkopen keuken (btw laag)",
        group="food",
    ),
    *_subcategory(
        BucketId.COST_OF_SALES,
        "Inkopen bieren fles (btw hoog)",
        "Inkopen sterke dranken (btw hoog)",
        "Inkopen wijnen (btw hoog)",
        "Inkopen bar overig hoog (btw hoog)",
        "Inkopen bar overig laag (btw laag)",
        "Inkopen speciaalbier fles (btw hoog)",
        "Inkopen speciaalbier tap (btw hoog)",
        "Inkopen pilsner tap (btw hoog)",
        "Inkopen koffie (btw laag)",
        "Inkopen frisdrank (btw laag)",
        "Inkopen bieren (btw laag)",
        "Inkopen alcohol vrije drank (btw laag)",
        "Inkopen bar overige (btw laag)",
        "Statiegeld",
        group="beverage",
    ),
    *_subcategory(BucketId.COST_OF_SALES, "Inkopen (geheel vrijgesteld van btw)"),
    *_subcategory(
        BucketId.LABOR,
        "Onkostenvergoeding keuken",
        "Onkostenvergoeding bediening",
        "Loonkosten Overhead",
        "HOP premie",
        "Studie- en opleidsingskosten personeel",
        "Ziekengeldverzekering",
        "Arbodienst",
        "Bedrijfskleding",
        "Overige personeelskosten",
        "Waskosten uniformen",
        "Uitkering ziekengeld",
        "Onkostenvergoeding",
        "Overige lasten uit hoofde van personeelsbeloningen",
        "Overige personeelsgerelateerde kosten",
        "Pensioenlasten",
        "Sociale lasten",
        "Werkkostenregeling - detail",
        group="contract",
    ),
    *_subcategory(
        BucketId.OTHER_COSTS,
        "Elektra",
        "Huur gebouwen",
        "Huur",
        "Gas",
        "Water",
        "Onderhoud gebouwen",
        "Schoonmaakkosten",
        "Gemeentelijke lasten etc.",
        "Overige huisvestingskosten",
        group="housing",
    ),
    *_subcategory(
        BucketId.OTHER_COSTS,
        "Huur machines",
        "Kleine aanschaffingen",
        "Kleine aanschaffingen bar",
        "Kleine aanschaffingen keuken",
        "Waskosten Linnen",
        "Papierwaren",
        "Reparatie en onderhoud",
        "Reparatie en onderhoud keuken",
        "Glaswerk / bestek",
        group="operating",
    ),
    *_subcategory(
        BucketId.OTHER_COSTS,
        "Decoratie",
        "Advertenties",
        "Reclame",
        "Sponsoring",
        "Muziek en entertainment",
        "Representatiekosten",
        "Reis- en verblijfkosten",
        "Overige verkoopkosten",
        group="sales",
    ),
    *_subcategory(
        BucketId.OTHER_COSTS,
        "Brandstoffen",
        "Onderhoud auto(`s)",
        "Leasekosten auto(`s)",
        group="car",
    ),
    *_subcategory(
        BucketId.OTHER_COSTS,
        "Kantoorbenodigdheden",
        "Kosten automatisering",
        "Telecommunicatie",
        "Drukwerk",
        "Bedrijfsschadeverzekering",
        "Contributies-abonnementen",
        group="office",
    ),
    *_subcategory(BucketId.OTHER_COSTS, "Overige verzekeringen", group="insurance"),
    *_subcategory(
        BucketId.OTHER_COSTS,
        "Salarisadministratie",
        "Administratiekosten",
        "Advieskosten",
        "Juridische advieskosten",
        group="accounting",
    ),
    *_subcategory(
        BucketId.OTHER_COSTS,
        "Boetes",
        "Kosten betalingsverkeer",
        group="administrative",
    ),
    *_subcategory(
        BucketId.OTHER_COSTS,
        "Kosten betalingsverkeer Formitable B.V.",
        group="other",
    ),
    *_subcategory(
        BucketId.DEPRECIATION,
        "Afschrijvingen op immateriële vaste activa",
        "Afschrijvingen op materiële vaste activa",
    ),
    *_subcategory(
        BucketId.FINANCIAL_RESULT,
        "Rentelasten en soortgelijke kosten",
        "Rentebaten en soortgelijke opbrengsten",
        group="interest",
    ),
    *_subcategory(
        BucketId.FINANCIAL_RESULT,
        "Opbrengst van vorderingen die tot de vaste activa behoren en van effecten",
        group="receivables",
    ),
    # Prefix rules, evaluated after every exact rule above
    *_subcategory_prefix(
        BucketId.LABOR,
        "Bruto Salarissen",
        "Doorberekende loonkosten",
        "Mutatie reservering vakantie",
        "Werkgeversdeel",
        group="contract",
    ),
    *_subcategory_prefix(BucketId.LABOR, "Inhuur", group="flex"),
    *_subcategory_prefix(BucketId.COST_OF_SALES, "Inkopen"),
    *_subcategory_prefix(BucketId.DEPRECIATION, "Afschrijvingskosten"),
    *_subcategory_prefix(BucketId.FINANCIAL_RESULT, "Rente", group="interest"),
)


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one line item."""

    bucket: BucketId
    rule: Optional[CategoryRule] = None
    group: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.rule is None

    @property
    def matched_on_category(self) -> bool:
        return self.rule is not None and self.rule.match_field is MatchField.CATEGORY


def _ordered(rules: Iterable[CategoryRule]) -> tuple[CategoryRule, ...]:
    rules = tuple(rules)
    exact = tuple(rule for rule in rules if rule.kind is MatchKind.EXACT)
    prefix = tuple(rule for rule in rules if rule.kind is MatchKind.PREFIX)
    return exact + prefix


@dataclass(frozen=True)
class CategoryRuleSet:
    """Closed set of classification rules plus per-bucket rollup policies."""

    category_rules: tuple[CategoryRule, ...] = CATEGORY_RULES
    subcategory_rules: tuple[CategoryRule, ...] = SUBCATEGORY_RULES
    rollup_policies: dict[BucketId, RollupPolicy] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "category_rules", _ordered(self.category_rules))
        object.__setattr__(self, "subcategory_rules", _ordered(self.subcategory_rules))

    def policy_for(self, bucket: BucketId) -> RollupPolicy:
        """Get the rollup policy of a bucket (SUM_ALL unless configured)."""
        return self.rollup_policies.get(bucket, RollupPolicy.SUM_ALL)

    def with_rollup_policy(self, bucket: BucketId, policy: RollupPolicy) -> "CategoryRuleSet":
        """Return a copy of this rule set with one bucket's policy replaced."""
        policies = dict(self.rollup_policies)
        policies[bucket] = policy
        return CategoryRuleSet(
            category_rules=self.category_rules,
            subcategory_rules=self.subcategory_rules,
            rollup_policies=policies,
        )

    def match_category(self, category: Optional[str]) -> Optional[CategoryRule]:
        for rule in self.category_rules:
            if rule.matches(category):
                return rule
        return None

    def match_subcategory(self, subcategory: Optional[str]) -> Optional[CategoryRule]:
        for rule in self.subcategory_rules:
            if rule.matches(subcategory):
                return rule
        return None

    def classify(self, item: LineItem) -> Classification:
        """Assign a line item to exactly one bucket.

        Args:
            item: Line item to classify

        Returns:
            Classification with the bucket, the matching rule (None for the
            sign fallback) and the detail group of the item
        """
        subcategory_rule = self.match_subcategory(item.subcategory)

        category_rule = self.match_category(item.category)
        if category_rule is not None:
            group = category_rule.group
            # Detail rows refine the group of their parent bucket
            if (
                subcategory_rule is not None
                and subcategory_rule.bucket is category_rule.bucket
                and subcategory_rule.group is not None
            ):
                group = subcategory_rule.group
            return Classification(category_rule.bucket, category_rule, group)

        if subcategory_rule is not None:
            return Classification(
                subcategory_rule.bucket, subcategory_rule, subcategory_rule.group
            )

        if item.amount >= Decimal("0"):
            return Classification(BucketId.UNCLASSIFIED_REVENUE)
        return Classification(BucketId.UNCLASSIFIED_COSTS)


DEFAULT_RULES = CategoryRuleSet()
