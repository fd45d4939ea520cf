"""Format analyses and P&L reports into Telegram HTML messages."""

import html
from decimal import Decimal

from src.models.analysis import TokenAnalysis
from src.parsers.market_constants import SUPPORTED_CHAINS
from src.parsers.trading_metrics import TradingMetrics, compute_trading_metrics
from src.parsers.wallet_pnl import WalletReport

WARNING_TEXT = {
    "stablecoin_backfilled": "Sparse stablecoin data, defaults filled in",
    "synthetic_stablecoin_defaults": "No reliable pool, showing stablecoin defaults",
    "liquidity_below_floor": "Pool liquidity below the chain minimum",
    "wide_price_spread": "Wide price spread between exchanges",
    "high_volume_liquidity_ratio": "Unusually high volume/liquidity ratio",
    "unusual_buy_sell_ratio": "Unusual buy/sell ratio",
    "high_price_impact": "High price impact, consider smaller trades",
    "negative_holdings": "More sold than bought, history looks incomplete",
    "skipped_malformed_transactions": "Some transactions could not be read",
}


def format_usd(value: Decimal | float | None) -> str:
    """Compact dollars: $1.2B, $3.4M, $5.6K, $7.89. Unknown -> '?'."""
    if value is None:
        return "?"
    v = float(value)
    sign = "-" if v < 0 else ""
    v = abs(v)
    if v >= 1_000_000_000:
        return f"{sign}${v / 1_000_000_000:.1f}B"
    if v >= 1_000_000:
        return f"{sign}${v / 1_000_000:.1f}M"
    if v >= 1_000:
        return f"{sign}${v / 1_000:.1f}K"
    return f"{sign}${v:.2f}"


def format_price(value: Decimal | float | None) -> str:
    """Price with precision scaled to magnitude."""
    if value is None:
        return "?"
    v = float(value)
    if v == 0:
        return "$0"
    if v < 0.00001:
        return f"${v:.2e}"
    if v < 0.001:
        return f"${v:.7f}"
    if v < 0.1:
        return f"${v:.5f}"
    if v < 1:
        return f"${v:.4f}"
    return f"${v:,.2f}"


def format_pct(value: float | None) -> str:
    if value is None:
        return "?"
    return f"{value:+.2f}%"


def _trend(value: float | None) -> str:
    if value is None:
        return ""
    return " 📈" if value >= 0 else " 📉"


def _warning_lines(codes: list[str]) -> list[str]:
    return [f"⚠️ {WARNING_TEXT.get(code, code)}" for code in dict.fromkeys(codes)]


def format_token_analysis(
    analysis: TokenAnalysis, metrics: TradingMetrics | None = None
) -> str:
    """Full /analyze reply."""
    metrics = metrics or compute_trading_metrics(analysis)
    symbol = html.escape(analysis.symbol)
    lines = [
        f"<b>{symbol}</b> · {html.escape(analysis.name)} · {html.escape(analysis.chain_id.upper())}",
        f"<code>{html.escape(analysis.token_address)}</code>",
        "",
        "<b>Price</b>",
        f"Current: {format_price(analysis.price_usd)}",
        f"1H: {format_pct(analysis.price_change_1h)}{_trend(analysis.price_change_1h)}",
        f"24H: {format_pct(analysis.price_change_24h)}{_trend(analysis.price_change_24h)}",
    ]
    if analysis.ath is not None:
        lines.append(f"ATH: {format_price(analysis.ath.price)} ({analysis.ath.label})")
        lines.append(f"From ATH: {format_pct(analysis.from_ath_pct)}")
    else:
        lines.append("ATH: unknown")
    lines.append(f"Age: {html.escape(analysis.age)}")

    lines += [
        "",
        "<b>Market</b>",
        f"Market cap: {format_usd(analysis.market_cap)}",
        f"FDV: {format_usd(analysis.fdv)}",
        f"Liquidity: {format_usd(analysis.liquidity.usd)} ({html.escape(analysis.dex_id)})",
        f"Volume 1H / 6H / 24H: {format_usd(analysis.volume.h1)} / "
        f"{format_usd(analysis.volume.h6)} / {format_usd(analysis.volume.h24)}",
    ]
    if metrics.volume_liquidity_ratio is not None:
        lines.append(f"Volume/Liquidity: {metrics.volume_liquidity_ratio:.1f}x")

    if analysis.transactions is not None:
        tx = analysis.transactions
        lines += ["", "<b>Activity (24H)</b>", f"Buys: {tx.buys_24h} | Sells: {tx.sells_24h}"]
        if metrics.buy_share_pct is not None:
            pressure = "Bullish" if metrics.buy_share_pct > 50 else "Bearish"
            lines.append(f"Buy share: {metrics.buy_share_pct:.1f}% ({pressure})")

    if metrics.price_impact_pct:
        impacts = " | ".join(
            f"{format_usd(size)}: {pct:.2f}%" for size, pct in metrics.price_impact_pct.items()
        )
        lines += ["", f"<b>Price impact</b>\n{impacts}"]

    diff = analysis.price_differential
    if diff is not None:
        lines += [
            "",
            "<b>Exchange spread</b>",
            f"High: {format_price(diff.max_price)} ({html.escape(diff.max_dex)})",
            f"Low: {format_price(diff.min_price)} ({html.escape(diff.min_dex)})",
            f"Spread: {diff.spread_percent:.2f}%",
        ]

    warnings = _warning_lines(analysis.warnings + metrics.warnings)
    if warnings:
        lines += [""] + warnings

    if analysis.url:
        lines += ["", f'<a href="{html.escape(analysis.url)}">DexScreener</a>']
    return "\n".join(lines)


def format_wallet_report(report: WalletReport, wallet_address: str) -> str:
    """Full /wallet reply."""
    pnl = report.pnl
    symbol = html.escape(report.analysis.symbol)
    lines = [
        f"<b>Wallet analysis · {html.escape(report.chain)}</b>",
        f"<code>{html.escape(wallet_address)}</code>",
        "",
        "<b>Transactions</b>",
        f"Buys: {pnl.buy_count} | Sells: {pnl.sell_count}",
        "",
        "<b>Position</b>",
        f"Bought: {pnl.total_bought:,.4f} {symbol} at avg {format_price(pnl.average_buy_price)}",
        f"Sold: {pnl.total_sold:,.4f} {symbol} at avg {format_price(pnl.average_sell_price)}",
        f"Holding: {pnl.current_holdings:,.4f} {symbol}",
        "",
        "<b>Profit / loss</b>",
        f"Current price: {format_price(pnl.current_price)}",
        f"Realized: {format_usd(pnl.realized_pnl)}",
        f"Unrealized: {format_usd(pnl.unrealized_pnl)}",
        f"Total: {format_usd(pnl.total_pnl)} ({format_pct(pnl.total_pnl_pct)})",
    ]
    warnings = _warning_lines(pnl.warnings)
    if warnings:
        lines += [""] + warnings
    return "\n".join(lines)


def format_help() -> str:
    chains = ", ".join(c.capitalize() for c in SUPPORTED_CHAINS)
    return (
        "<b>Token Analytics Bot</b>\n\n"
        "Commands:\n"
        "/analyze &lt;token&gt; [chain] - Price, liquidity, volume, ATH\n"
        "/wallet &lt;wallet&gt; &lt;token&gt; - Wallet P&amp;L for a token\n"
        "/status - Live ETH and SOL prices\n"
        "/help - This message\n\n"
        "Example:\n"
        "<code>/analyze 0xdAC17F958D2ee523a2206206994597C13D831ec7</code>\n\n"
        f"Chains: {chains}"
    )


def format_status(eth: TokenAnalysis | None, sol: TokenAnalysis | None) -> str:
    lines = ["<b>Live Market Prices</b>"]
    for label, analysis in (("Ethereum (ETH)", eth), ("Solana (SOL)", sol)):
        lines.append("")
        lines.append(f"<b>{label}</b>")
        if analysis is None:
            lines.append("Price unavailable")
            continue
        lines.append(f"Price: {format_price(analysis.price_usd)}")
        lines.append(
            f"24h: {format_pct(analysis.price_change_24h)}{_trend(analysis.price_change_24h)}"
        )
    return "\n".join(lines)
