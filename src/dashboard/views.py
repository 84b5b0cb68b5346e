"""
Dashboard Views

Turns fetched report payloads into view models: summary cards, chart specs
(line, bar, pie) and detail tables. Labels follow the Brazilian Portuguese UI
and money is shown in BRL.
"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from src.dashboard.state import DashboardState, Tab


class SummaryCard(BaseModel):
    """Headline number"""
    title: str
    value: str
    subtitle: Optional[str] = None
    color: Literal["blue", "green", "purple", "red"] = "blue"


class ChartSeries(BaseModel):
    key: str
    label: str


class Chart(BaseModel):
    """
    Chart specification.

    ``category_key`` names the field used for the x axis (line/bar) or the
    slice names (pie); each series is plotted from ``data``.
    """
    kind: Literal["line", "bar", "pie"]
    title: str
    category_key: str
    series: List[ChartSeries]
    data: List[Dict[str, Any]]
    horizontal: bool = False


class Table(BaseModel):
    title: str
    columns: List[str]
    rows: List[List[str]]


class TabView(BaseModel):
    """Everything rendered for one tab"""
    tab: Tab
    loading: bool = False
    cards: List[SummaryCard] = Field(default_factory=list)
    charts: List[Chart] = Field(default_factory=list)
    tables: List[Table] = Field(default_factory=list)
    empty_message: Optional[str] = None


def format_currency(value: Optional[float]) -> str:
    """Format as Brazilian reais, e.g. ``R$ 1.234,56``."""
    amount = float(value or 0)
    digits = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if amount < 0 else ""
    return f"{sign}R$ {digits}"


def format_day(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def _overview_view(view: TabView, data: Dict[str, Any]) -> None:
    overview = data.get("overview")
    if overview is not None:
        rate = overview.cancellation_rate * 100
        view.cards = [
            SummaryCard(
                title="Total de Vendas",
                value=str(overview.total_sales),
                subtitle=f"{overview.completed_sales} completadas",
            ),
            SummaryCard(title="Receita Total", value=format_currency(overview.total_revenue), color="green"),
            SummaryCard(title="Ticket Médio", value=format_currency(overview.avg_ticket), color="purple"),
            SummaryCard(
                title="Taxa de Cancelamento",
                value=f"{rate:.1f}%",
                subtitle=f"{overview.cancelled_sales} canceladas",
                color="red",
            ),
        ]

    sales_by_date = data.get("sales_by_date") or []
    view.charts.append(
        Chart(
            kind="line",
            title="Vendas ao Longo do Tempo",
            category_key="date",
            series=[ChartSeries(key="total_sales", label="Vendas"), ChartSeries(key="revenue", label="Receita")],
            data=[
                {"date": row.date.strftime("%d/%m"), "total_sales": row.total_sales, "revenue": row.revenue}
                for row in sales_by_date
            ],
        )
    )


def _products_view(view: TabView, data: Dict[str, Any]) -> None:
    products = data.get("top_products") or []
    if not products:
        view.empty_message = "Nenhum produto encontrado. Tente ajustar os filtros ou o período selecionado."
        return

    view.charts.append(
        Chart(
            kind="bar",
            title="Top Produtos",
            category_key="product_name",
            series=[ChartSeries(key="total_revenue", label="Receita Total")],
            data=[{"product_name": p.product_name, "total_revenue": p.total_revenue} for p in products],
            horizontal=True,
        )
    )
    view.tables.append(
        Table(
            title="Detalhamento dos Produtos",
            columns=["Produto", "Qtd. Vendida", "Receita Total", "Preço Médio"],
            rows=[
                [p.product_name, f"{p.total_quantity:g}", format_currency(p.total_revenue), format_currency(p.avg_price)]
                for p in products
            ],
        )
    )


def _channels_view(view: TabView, data: Dict[str, Any]) -> None:
    channels = data.get("sales_by_channel") or []
    view.charts.extend([
        Chart(
            kind="pie",
            title="Receita por Canal",
            category_key="channel_name",
            series=[ChartSeries(key="revenue", label="Receita")],
            data=[{"channel_name": c.channel_name, "revenue": c.revenue} for c in channels],
        ),
        Chart(
            kind="bar",
            title="Vendas por Canal",
            category_key="channel_name",
            series=[ChartSeries(key="total_sales", label="Total de Vendas")],
            data=[{"channel_name": c.channel_name, "total_sales": c.total_sales} for c in channels],
        ),
    ])
    view.tables.append(
        Table(
            title="Análise Detalhada por Canal",
            columns=["Canal", "Total Vendas", "Receita", "Ticket Médio", "Tempo Entrega (min)"],
            rows=[
                [
                    c.channel_name,
                    str(c.total_sales),
                    format_currency(c.revenue),
                    format_currency(c.avg_ticket),
                    f"{c.avg_delivery_minutes} min" if c.avg_delivery_minutes else "N/A",
                ]
                for c in channels
            ],
        )
    )


def _temporal_view(view: TabView, data: Dict[str, Any]) -> None:
    hours = data.get("sales_by_hour") or []
    weekdays = data.get("sales_by_weekday") or []
    view.charts.extend([
        Chart(
            kind="bar",
            title="Vendas por Horário do Dia",
            category_key="hour",
            series=[ChartSeries(key="total_sales", label="Vendas")],
            data=[{"hour": f"{h.hour}h", "total_sales": h.total_sales, "revenue": h.revenue} for h in hours],
        ),
        Chart(
            kind="bar",
            title="Vendas por Dia da Semana",
            category_key="weekday_name",
            series=[ChartSeries(key="total_sales", label="Vendas"), ChartSeries(key="revenue", label="Receita")],
            data=[
                {"weekday_name": w.weekday_name, "total_sales": w.total_sales, "revenue": w.revenue}
                for w in weekdays
            ],
        ),
    ])


def _customers_view(view: TabView, data: Dict[str, Any]) -> None:
    top = data.get("top_customers") or []
    inactive = data.get("inactive_customers") or []
    view.tables.extend([
        Table(
            title=f"Top {len(top)} Clientes (Lifetime Value)",
            columns=["Cliente", "Total Compras", "Lifetime Value", "Ticket Médio", "Última Compra"],
            rows=[
                [
                    c.customer_name or "",
                    str(c.total_purchases),
                    format_currency(c.lifetime_value),
                    format_currency(c.avg_ticket),
                    format_day(c.last_purchase),
                ]
                for c in top
            ],
        ),
        Table(
            title="Clientes Inativos (30+ dias sem comprar)",
            columns=["Cliente", "Contato", "Total Compras", "Lifetime Value", "Dias Sem Comprar"],
            rows=[
                [
                    c.customer_name or "",
                    c.phone_number or c.email or "",
                    str(c.total_purchases),
                    format_currency(c.lifetime_value),
                    f"{c.days_since_purchase} dias",
                ]
                for c in inactive
            ],
        ),
    ])


_BUILDERS = {
    Tab.OVERVIEW: _overview_view,
    Tab.PRODUCTS: _products_view,
    Tab.CHANNELS: _channels_view,
    Tab.TEMPORAL: _temporal_view,
    Tab.CUSTOMERS: _customers_view,
}


def render_tab(state: DashboardState) -> TabView:
    """Build the view of the active tab from the last fetched data."""
    view = TabView(tab=state.active_tab, loading=state.loading)
    _BUILDERS[state.active_tab](view, state.data)
    return view


def render_text(view: TabView) -> str:
    """Plain-text rendering for terminals and logs."""
    lines = [f"== {view.tab.value} =="]
    if view.loading:
        lines.append("(carregando...)")

    for card in view.cards:
        line = f"{card.title}: {card.value}"
        if card.subtitle:
            line += f" ({card.subtitle})"
        lines.append(line)

    for chart in view.charts:
        lines.append("")
        lines.append(f"[{chart.kind}] {chart.title}")
        for point in chart.data:
            values = ", ".join(f"{s.label}={point.get(s.key)}" for s in chart.series)
            lines.append(f"  {point.get(chart.category_key)}: {values}")

    for table in view.tables:
        lines.append("")
        lines.append(table.title)
        widths = [len(c) for c in table.columns]
        for row in table.rows:
            widths = [max(w, len(cell)) for w, cell in zip(widths, row)]
        lines.append("  ".join(c.ljust(w) for c, w in zip(table.columns, widths)))
        for row in table.rows:
            lines.append("  ".join(cell.ljust(w) for cell, w in zip(row, widths)))

    if view.empty_message:
        lines.append(view.empty_message)

    return "\n".join(lines)
