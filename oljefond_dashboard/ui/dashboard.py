"""Streamlit dashboard for the oil fund value per capita.

Run with: streamlit run oljefond_dashboard/ui/dashboard.py
"""

from zoneinfo import ZoneInfo

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from oljefond_dashboard.config import Settings
from oljefond_dashboard.data.store import SeriesStore
from oljefond_dashboard.metrics.calculator import PerCapitaCalculator
from oljefond_dashboard.models.series import ChangeResult, Currency
from oljefond_dashboard.ui.i18n import (
    LANGUAGES,
    PLACEHOLDER,
    PreferenceStore,
    change_label,
    format_change,
    format_currency,
    format_int,
    format_rate,
    format_timestamp,
    resolve_currency,
    resolve_language,
    t,
)


DISPLAY_TZ = ZoneInfo("Europe/Oslo")


class SessionPreferenceStore:
    """Preferences held in the Streamlit session, under the selector widget keys."""

    def __init__(self, state) -> None:
        self.state = state

    @staticmethod
    def key(name: str) -> str:
        return f"pref_{name}"

    def get(self, key: str) -> str | None:
        value = self.state.get(self.key(key))
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self.state[self.key(key)] = value


# =============================================================================
# COMPONENTS
# =============================================================================

def build_chart_figure(frame: pd.DataFrame, currency: Currency, lang: str) -> go.Figure:
    """Area chart of the per-capita series in the display currency."""
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=frame.index, y=frame["per_capita"],
        mode="lines", line=dict(color="#4F46E5", width=2),
        fill="tozeroy", fillcolor="rgba(99, 102, 241, 0.15)",
        name=t("per_person", lang),
        hovertemplate="%{x|%d.%m.%y %H:%M}<br>%{y:,.0f} " + currency.value + "<extra></extra>",
    ))
    fig.update_layout(
        height=420, margin=dict(l=0, r=16, t=30, b=0),
        paper_bgcolor="rgba(0,0,0,0)", plot_bgcolor="rgba(0,0,0,0)",
        showlegend=False,
        xaxis=dict(showgrid=True, gridcolor="#e5e7eb", tickformat="%d.%m"),
        yaxis=dict(
            showgrid=True, gridcolor="#e5e7eb",
            tickprefix="$" if currency is Currency.USD else "",
            ticksuffix=" kr" if currency is Currency.NOK else "",
        ),
        hovermode="x unified",
    )
    return fig


def render_header(calc: PerCapitaCalculator, lang: str) -> None:
    updated = format_timestamp(calc.latest_timestamp(), lang, DISPLAY_TZ)
    st.markdown(
        f"""<div style="display: flex; justify-content: space-between; align-items: flex-end; margin-bottom: 0.5rem;">
            <h1 style="margin: 0; font-size: 2rem;">{t("title", lang)}</h1>
            <div style="color: #6b7280; font-size: 0.9rem;">{t("updated", lang)}: {updated}</div>
        </div>""",
        unsafe_allow_html=True,
    )


def render_change_pill(label: str, change: ChangeResult | None, currency: Currency, lang: str) -> None:
    if change is None:
        color = "#6b7280"
    else:
        color = "#065f46" if change.is_up else "#991b1b"
    st.markdown(
        f"""<div style="padding: 12px 14px; border-radius: 12px; background: #fff; border: 1px solid rgba(15, 23, 42, 0.08);">
            <div style="font-size: 12px; color: #6b7280; text-transform: uppercase; letter-spacing: 0.06em;">{change_label(label, lang)}</div>
            <div style="font-weight: 700; font-size: 16px; color: {color};">{format_change(change, currency, lang)}</div>
        </div>""",
        unsafe_allow_html=True,
    )


def render_hero(calc: PerCapitaCalculator, currency: Currency, lang: str) -> None:
    latest = calc.latest_value(currency)
    st.markdown(
        f"""<div style="font-size: 3.5rem; font-weight: 800; letter-spacing: -0.02em; padding: 16px 20px;
            border-radius: 16px; background: rgba(255, 255, 255, 0.7); border: 1px solid rgba(15, 23, 42, 0.06);">
            {format_currency(latest, currency) if latest is not None else PLACEHOLDER}
        </div>""",
        unsafe_allow_html=True,
    )
    changes = calc.changes(currency)
    for col, (label, change) in zip(st.columns(len(changes)), changes.items()):
        with col:
            render_change_pill(label, change, currency, lang)


def render_cards(calc: PerCapitaCalculator, currency: Currency, lang: str) -> None:
    per_capita = calc.latest_value(currency)
    fund = calc.latest_fund_total(currency)
    population = calc.latest_population()

    col1, col2, col3 = st.columns(3)
    col1.metric(t("per_capita", lang), format_currency(per_capita, currency) if per_capita is not None else PLACEHOLDER)
    col2.metric(t("fund_total", lang), format_currency(fund, currency) if fund is not None else PLACEHOLDER)
    col3.metric(t("population", lang), format_int(population, lang) if population is not None else PLACEHOLDER)


def render_footer(calc: PerCapitaCalculator, currency: Currency, lang: str) -> None:
    note = t("sources", lang)
    if currency is Currency.USD:
        fx = calc.latest_fx_observation()
        note += " " + t("rate_used", lang).format(rate=format_rate(fx.rate, lang))
        note += f" ({t('rate_fallback', lang)})" if fx.is_fallback else f" ({fx.date.isoformat()})"
    st.caption(note)


# =============================================================================
# PAGE
# =============================================================================

def seed_preferences(prefs: PreferenceStore, settings: Settings, host: str) -> tuple[Currency, str]:
    """
    Resolve currency and language and write them back to the store.

    In the app the store is the session state backing the selector widgets,
    so a choice made on the previous run is what gets resolved here.
    """
    currency = resolve_currency(
        prefs.get("currency"), host, settings.currency_hosts, settings.display_currency
    )
    lang = resolve_language(prefs.get("lang"))
    prefs.set("currency", currency.value)
    prefs.set("lang", lang)
    return currency, lang


def select_preferences(prefs: SessionPreferenceStore, settings: Settings) -> tuple[Currency, str]:
    """Currency and language selectors, seeded from saved preference or host."""
    currency, lang = seed_preferences(prefs, settings, st.context.headers.get("Host", ""))

    # Widgets keyed on the preference keys: labels may change language, state stays
    col_spacer, col_cur, col_lang = st.columns([4, 1, 1])
    with col_cur:
        selected = st.radio(
            t("currency", lang),
            options=[c.value for c in Currency],
            key=prefs.key("currency"),
            horizontal=True,
        )
    with col_lang:
        lang_selected = st.radio(
            t("language", lang),
            options=list(LANGUAGES),
            key=prefs.key("lang"),
            format_func=str.upper,
            horizontal=True,
        )

    return Currency(selected), lang_selected


def main() -> None:
    """Main dashboard entry point."""
    st.set_page_config(
        page_title="Oljefondet per nordmann",
        page_icon="",
        layout="wide",
        initial_sidebar_state="collapsed",
    )

    st.markdown(
        """
        <style>
            .stApp { background: linear-gradient(180deg, #f8fafc 0%, #ffffff 60%); }
            #MainMenu, footer { visibility: hidden; }
        </style>
        """,
        unsafe_allow_html=True,
    )

    settings = Settings()
    settings.validate()

    currency, lang = select_preferences(SessionPreferenceStore(st.session_state), settings)

    with st.spinner("..."):
        calc = PerCapitaCalculator.from_store(SeriesStore(settings.data_dir), settings)

    if calc.latest is None:
        st.error(t("no_data", lang) + " python -m oljefond_dashboard.data.collector all")
        return

    render_header(calc, lang)
    render_hero(calc, currency, lang)
    render_cards(calc, currency, lang)
    st.plotly_chart(
        build_chart_figure(calc.chart_frame(currency), currency, lang),
        use_container_width=True,
        config={"displayModeBar": False},
    )
    render_footer(calc, currency, lang)


if __name__ == "__main__":
    main()
