import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from ledger.config import load_config
from ledger.domain import EXPENSE, INCOME, ZERO, Category, Transaction, round_cents, round_whole, to_amount
from ledger.errors import LedgerError
from ledger.formatting import FormatterCache
from ledger.functional import validate_category, validate_transaction
from ledger.lazy import search_transactions, sorted_for_display, top_expense_categories
from ledger.periods import period_key
from ledger.services import ReportService
from ledger.transforms import (
    add_transaction,
    delete_transaction,
    edit_ledger,
    load_seed,
    new_id,
    upsert_budget,
    upsert_category,
)

config = load_config()
logging.basicConfig(level=config.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("ledger.app")

st.set_page_config(page_title="Finance Ledger", layout="wide")


@st.cache_resource
def get_formatters() -> FormatterCache:
    return FormatterCache(locale=config.locale, default_currency=config.default_currency)


@st.cache_resource
def get_reports() -> ReportService:
    return ReportService(config)


fmt = get_formatters()
reports = get_reports()

if "ledger" not in st.session_state:
    st.session_state.ledger = load_seed(config.seed_file)

ledger = st.session_state.ledger
tree = reports.tree(ledger)
wallet_by_id = {w.id: w for w in ledger.wallets}


def commit(**parts) -> None:
    st.session_state.ledger = edit_ledger(st.session_state.ledger, **parts)
    logger.info("Ledger edited (%s), version %d", ", ".join(parts), st.session_state.ledger.version)
    st.rerun()


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "🧾 Transactions", "🎯 Budgets", "🗂 Categories & Wallets"]
)

today = date.today()

if menu == "🏠 Overview":
    totals = reports.totals(ledger)
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Income", fmt.integer(totals.income))
    with k2:
        st.metric("Expenses", fmt.integer(totals.expense))
    with k3:
        st.metric("Net", fmt.integer(totals.net))
    with k4:
        st.metric("Total Balance", fmt.integer(totals.total_balance))

    col_from, col_to = st.columns(2)
    with col_from:
        start = st.date_input("From", value=None, key="range_from")
    with col_to:
        end = st.date_input("To", value=None, key="range_to")

    series = reports.monthly_series(ledger, start or None, end or None, rounded=True, today=today)
    if series:
        fig_ts = go.Figure()
        fig_ts.add_trace(go.Bar(x=[b.label for b in series], y=[int(b.income) for b in series], name="Income"))
        fig_ts.add_trace(go.Bar(x=[b.label for b in series], y=[int(b.expense) for b in series], name="Expense"))
        fig_ts.update_layout(barmode="group", template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_ts, use_container_width=True)
    else:
        st.info("No transactions in the selected range.")

    structure = reports.expense_structure(ledger, start or None, end or None, today=today)
    if structure:
        df_struct = pd.DataFrame(
            [{"Category": r.category_name, "Amount": float(r.amount), "Share": r.share_percent} for r in structure]
        )
        fig_pie = px.pie(df_struct, values="Amount", names="Category", title="Expense Structure")
        fig_pie.update_layout(height=350)
        st.plotly_chart(fig_pie, use_container_width=True)

    summary = reports.month_summary(ledger, period_key(today))
    st.caption(
        f"This month: net {fmt.integer(summary.net)}, "
        f"expenses are {fmt.percent(summary.expense_income_ratio)} of income"
    )

    top = list(top_expense_categories(ledger.transactions, ledger.categories, k=5))
    if top:
        st.subheader("📊 Top Expense Categories")
        st.table(pd.DataFrame([{"Category": n, "Spent": fmt.integer(v)} for n, v in top]))

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    query = st.text_input("Search… (date, type, amount, category, wallet, comment)")

    rows = []
    for t in sorted_for_display(search_transactions(ledger.transactions, query, ledger.categories, ledger.wallets)):
        wallet = wallet_by_id.get(t.wallet_id)
        rows.append({
            "id": t.id,
            "Date": t.date.isoformat(),
            "Type": t.kind,
            "Amount": fmt.money(t.amount, wallet.currency if wallet else None),
            "Category": tree.name_of(t.category_id),
            "Wallet": wallet.name if wallet else "—",
            "Comment": t.comment,
        })
    if rows:
        df_tx = pd.DataFrame(rows)
        st.dataframe(df_tx.drop(columns=["id"]), use_container_width=True, hide_index=True)
        st.download_button("⬇ Download CSV", df_tx.to_csv(index=False), file_name="transactions.csv")

        to_delete = st.selectbox("Delete transaction", [""] + [r["id"] for r in rows])
        if to_delete and st.button("🗑 Delete"):
            commit(transactions=delete_transaction(ledger.transactions, to_delete))
    else:
        st.info("No transactions match the search.")

    st.subheader("➕ Add Transaction")
    kind = st.radio("Type", [EXPENSE, INCOME], horizontal=True)
    leaves = [c for c in ledger.categories if c.kind == kind and tree.is_leaf(c.id)]
    with st.form("tx_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            tx_date = st.date_input("Date", value=today)
            amount = st.number_input("Amount", min_value=0.0, step=100.0, format="%.2f")
        with col2:
            category = st.selectbox("Category", leaves, format_func=lambda c: c.name)
            wallet = st.selectbox("Wallet", ledger.wallets, format_func=lambda w: w.name)
        comment = st.text_input("Comment (optional)")
        submitted = st.form_submit_button("Add")

    if submitted and category is not None and wallet is not None:
        tx = Transaction(
            id=new_id(),
            date=tx_date,
            kind=kind,
            amount=round_cents(to_amount(amount)),
            category_id=category.id,
            wallet_id=wallet.id,
            comment=comment.strip(),
        )
        result = validate_transaction(tx, ledger.wallets, ledger.categories)
        if result.is_left():
            st.error(result.get_error()["message"])
        else:
            commit(transactions=add_transaction(ledger.transactions, tx))

elif menu == "🎯 Budgets":
    st.title("🎯 Budgets")
    latest = max((t.date for t in ledger.transactions), default=today)
    period = st.text_input("Month (YYYY-MM)", value=period_key(latest))

    try:
        rollup = reports.rollup_report(ledger, period)
        report = reports.budget_report(ledger, period)
    except LedgerError as exc:
        st.error(str(exc))
        st.stop()

    st.subheader(fmt.month_label(period))
    for kind, title in ((INCOME, "Income"), (EXPENSE, "Expenses")):
        if not rollup[kind]:
            continue
        st.markdown(f"**{title}**")
        for row in rollup[kind]:
            c_name, c_plan, c_actual, c_diff = st.columns([3, 2, 2, 2])
            plan = int(round_whole(row.plan))
            actual = int(round_whole(row.actual))
            with c_name:
                st.write(row.category_name)
            with c_plan:
                new_plan = st.number_input(
                    "Plan", min_value=0, step=1, value=plan,
                    key=f"plan_{row.category_id}_{period}", label_visibility="collapsed",
                )
            with c_actual:
                st.write(fmt.integer(actual))
            with c_diff:
                st.write(fmt.integer(plan - actual))
            if new_plan != plan:
                # the rolled-up plan includes sub-category budgets; the root entry gets the rest
                own = next(
                    (b.amount for b in ledger.budgets if b.category_id == row.category_id and b.period == period),
                    ZERO,
                )
                updated = upsert_budget(ledger.budgets, row.category_id, period, new_plan - (row.plan - own))
                if updated != ledger.budgets:
                    commit(budgets=updated)

    st.subheader("Per-category plan vs. actual")
    if report.rows:
        df_budget = pd.DataFrame([
            {
                "Category": r.category_name,
                "Budget": fmt.currency2(r.budget),
                "Actual": fmt.currency2(r.actual),
                "Difference": fmt.currency2(r.difference),
            }
            for r in report.rows
        ])
        st.table(df_budget)
        st.caption(
            f"Total: budget {fmt.currency2(report.totals.budget)}, "
            f"actual {fmt.currency2(report.totals.actual)}, "
            f"difference {fmt.currency2(report.totals.difference)}"
        )
    else:
        st.info("No budgets or spending for this month.")

elif menu == "🗂 Categories & Wallets":
    st.title("🗂 Categories & Wallets")

    balances = reports.wallet_balances(ledger)
    wallet_cols = st.columns(max(1, len(ledger.wallets)))
    for col, w in zip(wallet_cols, ledger.wallets):
        with col:
            st.metric(w.name, fmt.money(balances.get(w.id), w.currency))

    def render(cat: Category, depth: int) -> None:
        st.markdown(f"{'&nbsp;' * 4 * depth}- {cat.name} _({cat.kind})_")
        for child in tree.children_of(cat.id):
            render(child, depth + 1)

    for root in tree.roots():
        render(root, 0)

    st.subheader("➕ Add Category")
    with st.form("cat_form", clear_on_submit=True):
        name = st.text_input("Name")
        cat_kind = st.selectbox("Type", [EXPENSE, INCOME])
        parent = st.selectbox("Parent", [None] + list(ledger.categories), format_func=lambda c: c.name if c else "—")
        added = st.form_submit_button("Add")

    if added and name.strip():
        cat = Category(id=new_id(), name=name.strip(), kind=cat_kind, parent_id=parent.id if parent else None)
        result = validate_category(cat, ledger.categories)
        if result.is_left():
            st.error(result.get_error()["message"])
        else:
            commit(categories=upsert_category(ledger.categories, cat))
