"""
Output Module
=============
Stampa a console del riepilogo portafoglio.

Include:
- print_allocation: allocazione per macro categoria e stato
- print_positions: ETF selezionati con peso effettivo
- print_costs: TER medio ponderato e costi annui stimati
- print_summary: report completo
"""

from etf_allocator.analytics.metrics import PortfolioMetrics
from etf_allocator.models.portfolio import AllocationStatus, PortfolioExport
from etf_allocator.utils.costs import format_cost_table

_STATUS_LABELS = {
    AllocationStatus.PERFECT: "✓ Allocazione perfetta",
    AllocationStatus.UNDER: "⚠️  Allocazione incompleta",
    AllocationStatus.OVER: "⚠️  Allocazione oltre il 100%",
}


def print_allocation(metrics: PortfolioMetrics) -> None:
    print("\n📊 ALLOCAZIONE")
    print("-" * 50)
    for item in metrics.allocation_breakdown():
        print(f"  {item['label']:<22} {item['value']:>6}%")
    total = metrics.total_allocation()
    print(f"  {'Totale':<22} {total:>6}%   {_STATUS_LABELS[metrics.allocation_status()]}")

    summary = metrics.category_summary()
    incomplete = summary[summary["active"] & ~summary["complete"]]
    for _, row in incomplete.iterrows():
        print(f"  ⚠️  {row['label']}: pesi interni al {row['weight_sum']}% (servono 100%)")


def print_positions(export: PortfolioExport) -> None:
    print("\n📋 ETF SELEZIONATI")
    print("-" * 50)
    if not export.rows:
        print("  Nessun ETF con peso > 0")
        return
    for row in export.rows:
        name = (row.name or "")[:40]
        print(f"  {row.category.label:<15} {name:<40} {row.identifier_code or '':<13} "
              f"TER {row.ter:>7}  {row.effective_weight:>6.2f}%")


def print_costs(export: PortfolioExport) -> None:
    print("\n💰 COSTI")
    print("-" * 50)
    print(f"  TER medio ponderato:    {export.weighted_expense_ratio:>12}%")
    for label, cost in format_cost_table(export.cost_table).items():
        print(f"  {label + ':':<23} {cost:>12}")


def print_summary(session) -> None:
    """Report completo dello stato corrente della sessione."""
    metrics = session.metrics()
    export = session.export()

    print("\n" + "=" * 70)
    print("                      PORTAFOGLIO ETF")
    if session.state.source_name:
        print(f"                 catalogo: {session.state.source_name} ({len(session.catalogue)} ETF)")
    print("=" * 70)

    print_allocation(metrics)
    print_positions(export)
    print_costs(export)

    print("\n" + "-" * 50)
    print(f"  ETF selezionati:        {metrics.selected_fund_count():>12}")
    print(f"  Copertura completa:     {metrics.portfolio_coverage():>11}%")
    verdict = "✓ Portafoglio completo" if metrics.is_portfolio_complete() else "Portafoglio non completo"
    print(f"  {verdict}")

    if export.isin_list:
        print("\n🔖 LISTA ISIN")
        print("-" * 50)
        for isin in export.isin_list.split("\n"):
            print(f"  {isin}")
    print("=" * 70)
