"""Export the per-capita page as self-contained HTML."""

import html
import json
from pathlib import Path

from oljefond_dashboard.config import Settings
from oljefond_dashboard.data.store import SeriesStore, format_timestamp as iso_timestamp
from oljefond_dashboard.metrics.calculator import PerCapitaCalculator
from oljefond_dashboard.models.series import ChangeResult, Currency
from oljefond_dashboard.ui.i18n import (
    DEFAULT_LANGUAGE,
    LANGUAGES,
    PLACEHOLDER,
    STRINGS,
    JsonPreferenceStore,
    PreferenceStore,
    change_label,
    format_change,
    format_currency,
    format_int,
    format_rate,
    resolve_currency,
    resolve_language,
    t,
)


def _change_payload(change: ChangeResult | None) -> dict | None:
    if change is None:
        return None
    return {
        "delta": round(change.absolute_delta, 2),
        "pct": round(change.percent_delta, 4),
        "since": iso_timestamp(change.reference_timestamp),
    }


def build_page_data(
    calculator: PerCapitaCalculator,
    settings: Settings,
    default_currency: Currency | None = None,
) -> dict:
    """
    Everything the page script needs, for both currencies.

    Values are converted server-side; the browser only switches between them.
    """
    default_currency = default_currency or settings.display_currency
    currencies = {}
    for currency in Currency:
        points = calculator.chart_series(currency)
        currencies[currency.value] = {
            "latest": calculator.latest_value(currency),
            "fund": calculator.latest_fund_total(currency),
            "changes": {
                label: _change_payload(change)
                for label, change in calculator.changes(currency).items()
            },
            "chart": {
                "x": [iso_timestamp(p.timestamp) for p in points],
                "y": [round(p.value, 2) for p in points],
            },
        }

    fx = calculator.latest_fx_observation()
    updated = calculator.latest_timestamp()
    return {
        "currencies": currencies,
        "population": calculator.latest_population(),
        "updated": iso_timestamp(updated) if updated else None,
        "fx": {
            "date": fx.date.isoformat() if fx.date else None,
            "rate": fx.rate,
            "isFallback": fx.is_fallback,
        },
        "windows": list(calculator.windows),
        "hostCurrency": {host: cur.value for host, cur in settings.currency_hosts.items()},
        "defaultCurrency": default_currency.value,
        "strings": STRINGS,
    }


def _pill(label: str, change: ChangeResult | None, currency: Currency, lang: str) -> str:
    direction = "" if change is None else ("up" if change.is_up else "down")
    return f'''
            <div class="pill" data-window="{html.escape(label)}">
                <div class="pill-label">{html.escape(change_label(label, lang))}</div>
                <div class="pill-value {direction}">{html.escape(format_change(change, currency, lang))}</div>
            </div>'''


def render_html(
    calculator: PerCapitaCalculator,
    settings: Settings,
    language: str = DEFAULT_LANGUAGE,
    currency: Currency | None = None,
) -> str:
    """Render the page with the default currency filled in server-side."""
    currency = currency or settings.display_currency
    data = build_page_data(calculator, settings, currency)

    latest = calculator.latest_value(currency)
    fund = calculator.latest_fund_total(currency)
    population = calculator.latest_population()
    hero = format_currency(latest, currency) if latest is not None else PLACEHOLDER

    pills = "".join(
        _pill(label, change, currency, language)
        for label, change in calculator.changes(currency).items()
    )

    fx = calculator.latest_fx_observation()
    rate_note = t("rate_used", language).format(rate=format_rate(fx.rate, language))
    if fx.is_fallback:
        rate_note += f" ({t('rate_fallback', language)})"
    elif fx.date:
        rate_note += f" ({fx.date.isoformat()})"

    # Keep "</" out of the inline script
    payload = json.dumps(data, ensure_ascii=False).replace("</", "<\\/")

    return f'''<!DOCTYPE html>
<html lang="{language}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(t("title", language))}</title>
    <script src="https://cdn.plot.ly/plotly-2.27.0.min.js"></script>
    <style>
        * {{
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }}

        body {{
            font-family: system-ui, -apple-system, BlinkMacSystemFont, sans-serif;
            min-height: 100vh;
            color: #111827;
            background: radial-gradient(1200px 600px at 20% -10%, #dbeafe 0%, rgba(219, 234, 254, 0) 60%),
                        radial-gradient(1200px 600px at 100% 0%, #ede9fe 0%, rgba(237, 233, 254, 0) 60%),
                        linear-gradient(180deg, #f8fafc 0%, #ffffff 60%);
            padding: 24px 16px 48px;
        }}

        .container {{
            max-width: 1100px;
            margin: 0 auto;
        }}

        /* Header */
        .header {{
            display: flex;
            align-items: flex-end;
            justify-content: space-between;
            gap: 16px;
            margin-bottom: 8px;
        }}

        h1 {{
            font-size: clamp(22px, 3vw, 32px);
            letter-spacing: -0.01em;
        }}

        .header-right {{
            display: flex;
            gap: 12px;
            align-items: center;
        }}

        .updated {{
            color: #6b7280;
            font-size: 14px;
        }}

        .toggle {{
            display: inline-flex;
            background: #fff;
            border: 1px solid rgba(15, 23, 42, 0.12);
            border-radius: 9999px;
            padding: 2px;
        }}

        .toggle button {{
            appearance: none;
            border: 0;
            background: transparent;
            padding: 6px 12px;
            border-radius: 9999px;
            font-weight: 700;
            font-size: 14px;
            color: #374151;
            cursor: pointer;
        }}

        .toggle button.active {{
            background: #4f46e5;
            color: #fff;
        }}

        /* Hero */
        .hero {{
            margin: 12px 0 18px;
            display: grid;
            gap: 12px;
        }}

        .hero-value {{
            font-size: clamp(36px, 6vw, 64px);
            font-weight: 800;
            letter-spacing: -0.02em;
            padding: 16px 20px;
            border-radius: 16px;
            background: rgba(255, 255, 255, 0.7);
            border: 1px solid rgba(15, 23, 42, 0.06);
        }}

        .changes, .cards {{
            display: grid;
            grid-template-columns: repeat(3, minmax(0, 1fr));
            gap: 12px;
        }}

        .pill, .card {{
            padding: 12px 16px;
            border-radius: 12px;
            background: rgba(255, 255, 255, 0.9);
            border: 1px solid rgba(15, 23, 42, 0.08);
        }}

        .pill-label, .card-title {{
            font-size: 12px;
            color: #374151;
            margin-bottom: 6px;
            text-transform: uppercase;
            letter-spacing: 0.06em;
        }}

        .card-title {{
            font-weight: 700;
        }}

        .pill-value {{
            font-weight: 700;
            font-size: 16px;
        }}

        .pill-value.up {{ color: #065f46; }}
        .pill-value.down {{ color: #991b1b; }}

        .card-value {{
            font-size: 22px;
            font-weight: 700;
        }}

        /* Chart */
        #chart {{
            height: clamp(280px, 45vh, 460px);
            margin-top: 22px;
            border-radius: 16px;
            background: #fff;
            border: 1px solid rgba(15, 23, 42, 0.06);
        }}

        .foot {{
            margin-top: 14px;
            color: #6b7280;
            font-size: 14px;
        }}

        @media (max-width: 720px) {{
            .cards, .changes {{
                grid-template-columns: 1fr;
            }}
        }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1 data-i18n="title">{html.escape(t("title", language))}</h1>
            <div class="header-right">
                <div class="toggle" id="currencyToggle" role="group">
                    <button data-currency="NOK" class="{"active" if currency is Currency.NOK else ""}">NOK</button>
                    <button data-currency="USD" class="{"active" if currency is Currency.USD else ""}">USD</button>
                </div>
                <div class="toggle" id="languageToggle" role="group">
                    <button data-lang="nb" class="{"active" if language == "nb" else ""}">NB</button>
                    <button data-lang="en" class="{"active" if language == "en" else ""}">EN</button>
                </div>
                <div class="updated" id="updated"></div>
            </div>
        </div>

        <div class="hero">
            <div class="hero-value" id="heroValue">{html.escape(hero)}</div>
            <div class="changes" id="changes">{pills}
            </div>
        </div>

        <div class="cards">
            <div class="card">
                <div class="card-title" data-i18n="per_capita">{html.escape(t("per_capita", language))}</div>
                <div class="card-value" id="perCapita">{html.escape(hero)}</div>
            </div>
            <div class="card">
                <div class="card-title" data-i18n="fund_total">{html.escape(t("fund_total", language))}</div>
                <div class="card-value" id="fundTotal">{html.escape(format_currency(fund, currency) if fund is not None else PLACEHOLDER)}</div>
            </div>
            <div class="card">
                <div class="card-title" data-i18n="population">{html.escape(t("population", language))}</div>
                <div class="card-value" id="population">{html.escape(format_int(population, language) if population is not None else PLACEHOLDER)}</div>
            </div>
        </div>

        <div id="chart"></div>

        <div class="foot">
            <span data-i18n="sources">{html.escape(t("sources", language))}</span>
            <span id="rateNote">{html.escape(rate_note) if currency is Currency.USD else ""}</span>
        </div>
    </div>

    <script>
        const DATA = {payload};
        const PLACEHOLDER = "{PLACEHOLDER}";
        const LOCALES = {{ nb: "nb-NO", en: "en-US" }};

        const state = {{ currency: DATA.defaultCurrency, lang: "{language}" }};

        function initialCurrency() {{
            const saved = localStorage.getItem("currency");
            if (saved === "NOK" || saved === "USD") return saved;
            const host = window.location.hostname.toLowerCase();
            for (const [fragment, cur] of Object.entries(DATA.hostCurrency)) {{
                if (host.includes(fragment)) return cur;
            }}
            return DATA.defaultCurrency;
        }}

        function initialLanguage() {{
            const saved = localStorage.getItem("lang");
            return saved === "nb" || saved === "en" ? saved : state.lang;
        }}

        function t(key) {{
            return (DATA.strings[state.lang] || DATA.strings.nb)[key] || key;
        }}

        function fmtCur(n, cur) {{
            if (n === null || n === undefined) return PLACEHOLDER;
            return cur === "NOK"
                ? new Intl.NumberFormat("nb-NO", {{ style: "currency", currency: "NOK", maximumFractionDigits: 0 }}).format(n)
                : new Intl.NumberFormat("en-US", {{ style: "currency", currency: "USD", maximumFractionDigits: 0 }}).format(n);
        }}

        function fmtInt(n) {{
            return n === null ? PLACEHOLDER : new Intl.NumberFormat(LOCALES[state.lang]).format(n);
        }}

        function fmtPct(p) {{
            return (p >= 0 ? "+" : "") +
                new Intl.NumberFormat(LOCALES[state.lang], {{ maximumFractionDigits: 2 }}).format(p) +
                (state.lang === "nb" ? "\u00a0%" : "%");
        }}

        function fmtChange(c, cur) {{
            if (!c) return PLACEHOLDER;
            const up = c.delta >= 0;
            const sign = c.delta > 0 ? "+" : "";
            return `${{up ? "▲" : "▼"}} ${{sign}}${{fmtCur(Math.round(c.delta), cur)}} (${{fmtPct(c.pct)}})`;
        }}

        function render() {{
            const cur = state.currency;
            const d = DATA.currencies[cur];
            document.documentElement.lang = state.lang;
            document.title = t("title");
            document.querySelectorAll("[data-i18n]").forEach(el => {{
                el.textContent = t(el.dataset.i18n);
            }});
            document.querySelectorAll("#currencyToggle button").forEach(b => {{
                b.classList.toggle("active", b.dataset.currency === cur);
            }});
            document.querySelectorAll("#languageToggle button").forEach(b => {{
                b.classList.toggle("active", b.dataset.lang === state.lang);
            }});

            document.getElementById("heroValue").textContent = fmtCur(d.latest, cur);
            document.getElementById("perCapita").textContent = fmtCur(d.latest, cur);
            document.getElementById("fundTotal").textContent = fmtCur(d.fund, cur);
            document.getElementById("population").textContent = fmtInt(DATA.population);
            document.getElementById("updated").textContent = DATA.updated
                ? `${{t("updated")}}: ${{new Date(DATA.updated).toLocaleString(LOCALES[state.lang], {{
                    hour: "2-digit", minute: "2-digit", day: "2-digit", month: "2-digit", year: "2-digit",
                }})}}`
                : PLACEHOLDER;

            document.querySelectorAll("#changes .pill").forEach(el => {{
                const c = d.changes[el.dataset.window];
                el.querySelector(".pill-label").textContent = t("change_" + el.dataset.window);
                const v = el.querySelector(".pill-value");
                v.textContent = fmtChange(c, cur);
                v.classList.toggle("up", !!c && c.delta >= 0);
                v.classList.toggle("down", !!c && c.delta < 0);
            }});

            let note = "";
            if (cur === "USD") {{
                const rate = new Intl.NumberFormat(LOCALES[state.lang], {{ maximumFractionDigits: 4 }}).format(DATA.fx.rate);
                note = " " + t("rate_used").replace("{{rate}}", rate);
                note += DATA.fx.isFallback ? ` (${{t("rate_fallback")}})` : ` (${{DATA.fx.date}})`;
            }}
            document.getElementById("rateNote").textContent = note;

            const trace = {{
                x: d.chart.x,
                y: d.chart.y,
                type: "scatter",
                mode: "lines",
                name: t("per_person"),
                line: {{ color: "#4F46E5", width: 2 }},
                fill: "tozeroy",
                fillcolor: "rgba(99, 102, 241, 0.15)",
                hovertemplate: "%{{x|%d.%m.%y %H:%M}}<br>%{{y:,.0f}} " + cur + "<extra></extra>",
            }};

            const layout = {{
                paper_bgcolor: "transparent",
                plot_bgcolor: "transparent",
                margin: {{ t: 30, r: 16, b: 40, l: 90 }},
                xaxis: {{ showgrid: true, gridcolor: "#e5e7eb", tickformat: "%d.%m" }},
                yaxis: {{ showgrid: true, gridcolor: "#e5e7eb", tickprefix: cur === "USD" ? "$" : "", ticksuffix: cur === "NOK" ? " kr" : "" }},
                hovermode: "x unified",
            }};

            Plotly.react("chart", [trace], layout, {{ displayModeBar: false, responsive: true }});
        }}

        document.querySelectorAll("#currencyToggle button").forEach(b => {{
            b.addEventListener("click", () => {{
                state.currency = b.dataset.currency;
                localStorage.setItem("currency", state.currency);
                render();
            }});
        }});
        document.querySelectorAll("#languageToggle button").forEach(b => {{
            b.addEventListener("click", () => {{
                state.lang = b.dataset.lang;
                localStorage.setItem("lang", state.lang);
                render();
            }});
        }});

        state.currency = initialCurrency();
        state.lang = initialLanguage();
        render();
    </script>
</body>
</html>'''


def export_html(
    output_path: Path | str | None = None,
    language: str | None = None,
    settings: Settings | None = None,
    calculator: PerCapitaCalculator | None = None,
    prefs: PreferenceStore | None = None,
) -> Path:
    """
    Generate the self-contained HTML page.

    Args:
        output_path: Where to save the HTML file. Defaults to dist/index.html
        language: Initial page language ("nb" or "en"); overrides saved preferences
        settings: Settings to use; loaded from the environment if omitted
        calculator: Prebuilt calculator; loaded from the series store if omitted
        prefs: Saved display preferences for the initial currency and language

    Returns:
        Path to the generated file
    """
    settings = settings or Settings()
    settings.validate()
    if calculator is None:
        calculator = PerCapitaCalculator.from_store(SeriesStore(settings.data_dir), settings)

    if calculator.latest is None:
        raise ValueError("No data available. Run the collector first.")

    saved_currency = prefs.get("currency") if prefs else None
    currency = resolve_currency(saved_currency, None, {}, settings.display_currency)
    language = language or resolve_language(prefs.get("lang") if prefs else None)

    page = render_html(calculator, settings, language, currency)

    if output_path is None:
        output_path = settings.data_dir.parent / "dist" / "index.html"
    else:
        output_path = Path(output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(page, encoding="utf-8")

    return output_path


def main() -> None:
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Export the per-capita page as HTML")
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output path (default: dist/index.html)"
    )
    parser.add_argument(
        "-l", "--lang",
        choices=list(LANGUAGES),
        default=None,
        help="Initial page language (default: saved preference, then nb)"
    )
    parser.add_argument(
        "--prefs",
        type=str,
        default=None,
        help="JSON preferences file with saved 'currency' and 'lang'"
    )
    args = parser.parse_args()

    prefs = JsonPreferenceStore(Path(args.prefs)) if args.prefs else None

    try:
        path = export_html(args.output, args.lang, prefs=prefs)
        print(f"Page exported to: {path}")
        print(f"File size: {path.stat().st_size / 1024:.1f} KB")
    except ValueError as e:
        print(f"Error: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
