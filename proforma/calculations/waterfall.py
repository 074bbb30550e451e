"""Refinance distribution waterfall across limited and general partners.

LP capital is repaid strictly in proportion to holding. GP capital is
equalized: the GP pool goes first to the partners whose cash-in is highest
relative to their holding, so that every GP is left with the same residual
cash-in per point of holding.
"""

from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List

from ..models.lookups import PartnerClass
from ..models.rows import GpContributionRow
from .coercion import to_number


@dataclass
class PartnerDistribution:
    """One partner's share of the refinance and resulting returns."""

    row_id: str
    partner: str
    partner_class: PartnerClass
    contribution: float
    holding_pct: float
    refinance_share: float  # Cash returned from the refinance
    coc_before: float  # Cash-on-cash before refinance
    coc_after: float  # Cash-on-cash after refinance

    @property
    def residual_cash_in(self) -> float:
        """Capital still in the deal after the refinance payout."""
        return self.contribution - self.refinance_share


@dataclass
class RefinanceWaterfall:
    """Partner-level distribution of a cash-out refinance."""

    refinance_amount: float
    holding_scale: float  # 100 / total holding when over-allocated, else 1
    lp_pool: float
    gp_pool: float
    distributions: List[PartnerDistribution] = field(default_factory=list)

    @property
    def lp_distributed(self) -> float:
        return sum(
            d.refinance_share for d in self.distributions if d.partner_class == PartnerClass.LP
        )

    @property
    def gp_distributed(self) -> float:
        return sum(
            d.refinance_share for d in self.distributions if d.partner_class == PartnerClass.GP
        )

    @property
    def total_distributed(self) -> float:
        return self.lp_distributed + self.gp_distributed


def equalize_gp_payouts(
    contributions: Dict[Hashable, float],
    holdings: Dict[Hashable, float],
    gp_pool: float,
) -> Dict[Hashable, float]:
    """Split the GP pool so residual cash-in is proportional to holding.

    target_residual = (sum contributions - gp_pool) x holding / sum holding
    payout = contribution - target_residual

    A GP whose payout would be negative receives nothing and drops out; the
    targets are then recomputed over the remaining GPs. A GP with no holding
    has a zero target residual and is repaid its whole contribution. Payouts
    sum to the pool unless every GP with a positive holding drops out, in
    which case nothing is paid.

    Args:
        contributions: Contribution per GP key.
        holdings: Holding percent per GP key.
        gp_pool: Refinance cash allocated to GPs.

    Returns:
        Payout per GP key.

    Example:
        >>> equalize_gp_payouts({"a": 100, "b": 50}, {"a": 10, "b": 10}, 50)
        {'a': 50.0, 'b': 0.0}
    """
    payouts = {key: 0.0 for key in contributions}
    if gp_pool <= 0:
        return payouts

    active = list(contributions)
    while active:
        total_holding = sum(max(0.0, holdings.get(key, 0)) for key in active)
        if total_holding <= 0:
            break
        residual_total = sum(contributions[key] for key in active) - gp_pool

        candidate = {
            key: contributions[key]
            - residual_total * max(0.0, holdings.get(key, 0)) / total_holding
            for key in active
        }
        clipped = [key for key in active if candidate[key] < 0]
        if not clipped:
            payouts.update(candidate)
            break
        active = [key for key in active if key not in clipped]

    return payouts


def _cash_on_cash(cash: float, holding_pct: float, invested: float) -> float:
    if invested <= 0:
        return 0.0
    return (cash * holding_pct / 100) / invested


def distribute_refinance(
    rows: Iterable[GpContributionRow],
    refinance_amount: float,
    available_cash_before: float = 0.0,
    available_cash_after: float = 0.0,
) -> RefinanceWaterfall:
    """Distribute a cash-out refinance across LP and GP contribution rows.

    LP share = R x holding / 100. The GP pool, R x total GP holding / 100, is
    split by equalize_gp_payouts. When holdings add up to more than 100% both
    pools are scaled by 100 / total holding so no more than R is paid out.

    Args:
        rows: Partner contribution rows ("LP" rows are limited partners).
        refinance_amount: Cash-out refinance amount R.
        available_cash_before: Annual cash after debt service, no refinance.
        available_cash_after: Annual cash after debt service, with refinance.

    Returns:
        RefinanceWaterfall with one PartnerDistribution per row, in input order.
    """
    rows = list(rows)
    refinance = to_number(refinance_amount)
    cash_before = to_number(available_cash_before)
    cash_after = to_number(available_cash_after)

    total_holding = sum(to_number(row.holding_pct) for row in rows)
    scale = 100 / total_holding if total_holding > 100 else 1.0

    lp_rows = [(i, row) for i, row in enumerate(rows) if row.partner_class == PartnerClass.LP]
    gp_rows = [(i, row) for i, row in enumerate(rows) if row.partner_class == PartnerClass.GP]

    lp_pool = refinance * sum(to_number(row.holding_pct) for _, row in lp_rows) / 100 * scale
    gp_pool = refinance * sum(to_number(row.holding_pct) for _, row in gp_rows) / 100 * scale

    shares = {
        i: refinance * to_number(row.holding_pct) / 100 * scale for i, row in lp_rows
    }
    shares.update(equalize_gp_payouts(
        contributions={i: to_number(row.amount_usd) for i, row in gp_rows},
        holdings={i: to_number(row.holding_pct) for i, row in gp_rows},
        gp_pool=gp_pool,
    ))

    distributions = []
    for i, row in enumerate(rows):
        contribution = to_number(row.amount_usd)
        holding = to_number(row.holding_pct)
        share = shares.get(i, 0.0)
        distributions.append(PartnerDistribution(
            row_id=row.id,
            partner=row.partner,
            partner_class=row.partner_class,
            contribution=contribution,
            holding_pct=holding,
            refinance_share=share,
            coc_before=_cash_on_cash(cash_before, holding, contribution),
            coc_after=_cash_on_cash(cash_after, holding, contribution - share),
        ))

    return RefinanceWaterfall(
        refinance_amount=refinance,
        holding_scale=scale,
        lp_pool=lp_pool,
        gp_pool=gp_pool,
        distributions=distributions,
    )
