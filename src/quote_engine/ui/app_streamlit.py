"""
Streamlit UI for the Quote Engine.

Features:
- Budget calculator with live price breakdown
- Formal quote builder with milestone schedule
- Quote inbox with view/accept/reject actions
- Rate template explorer
"""
import streamlit as st
import pandas as pd
from datetime import datetime

from quote_engine.catalog import RateCatalog
from quote_engine.config.settings import get_settings
from quote_engine.engine import (
    Complexity, DesignType, InvalidTransition, PricingEngine, Selection, Timeline, TemplateNotFound,
)
from quote_engine.quotes import ProjectDetails, QuoteService, QuoteTimeline
from quote_engine.utils.logger import setup_logging


st.set_page_config(
    page_title="Project Quote Engine",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_service() -> QuoteService:
    """Get cached engine + quote service."""
    settings = get_settings()
    setup_logging(settings.log_level)
    engine = PricingEngine(RateCatalog.load(settings), settings)
    return QuoteService(engine)


try:
    service = get_service()
    engine = service.engine
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# SIDEBAR: Client Context
# ============================================================================
with st.sidebar:
    st.header("👤 Client Context")
    client_id = st.text_input("Client ID", value="client-demo", key="client_input")
    currency = engine.catalog.get_preferred_currency(client_id)
    st.markdown(f"**Display Currency:** `{currency}`")

    st.divider()
    st.success(f"📐 **{len(engine.catalog.list_active_templates())} Templates Active**")


st.title("Project Quote Engine")
st.caption(f"Estimates & Quotes | {datetime.now().strftime('%Y-%m-%d')}")

templates = engine.catalog.list_active_templates()
categories = [t.category for t in templates]

tab1, tab2, tab3, tab4 = st.tabs(["⚡ Budget Calculator", "📝 Quote Builder", "📬 My Quotes", "📚 Templates"])


def tier_inputs(prefix: str):
    c1, c2, c3 = st.columns(3)
    complexity = c1.selectbox("Complexity", [t.value for t in Complexity], index=1, key=f"{prefix}_cx")
    timeline = c2.selectbox("Timeline", [t.value for t in Timeline], index=1, key=f"{prefix}_tl")
    design = c3.selectbox("Design", [t.value for t in DesignType], index=1, key=f"{prefix}_dt")
    return complexity, timeline, design


# ============================================================================
# TAB 1: BUDGET CALCULATOR
# ============================================================================
with tab1:
    if not categories:
        st.info("No active rate templates.")
    else:
        col1, col2 = st.columns([1.6, 1.4], gap="large")

        with col1:
            category = st.selectbox("Project Type", categories, key="calc_category")
            template = engine.catalog.find_active_template(category)
            features = st.multiselect(
                "Features",
                [f.name for f in template.features],
                default=[f.name for f in template.features if f.is_required],
                key="calc_features"
            )
            complexity, timeline, design = tier_inputs("calc")
            custom_text = st.text_area(
                "Custom Requirements (one per line)", height=100, key="calc_custom"
            )
            custom = [line.strip() for line in custom_text.splitlines() if line.strip()]

        with col2:
            st.subheader("Estimate")
            with st.container(border=True):
                selection = Selection(
                    features=features,
                    complexity=complexity,
                    timeline=timeline,
                    design_type=design,
                    custom_requirements=custom,
                )
                try:
                    result = engine.estimate(category, selection, client_id=client_id)
                except TemplateNotFound as e:
                    st.error(str(e))
                    st.stop()

                m1, m2, m3 = st.columns(3)
                m1.metric("Total", f"{result.currency} {result.total_price:,}")
                m2.metric("Hours", f"{result.estimated_hours:,.0f}")
                m3.metric("Days", result.estimated_days)

                breakdown = result.to_estimate_dict()['breakdown']
                st.dataframe(
                    pd.DataFrame([
                        {'Component': k.title(), 'Amount (INR)': round(v, 2)}
                        for k, v in breakdown.items()
                    ]),
                    use_container_width=True,
                    hide_index=True
                )

                with st.expander("🔍 Computation Trace"):
                    for t in result.trace:
                        if t.value:
                            st.caption(f"**{t.step}**: {t.description} = `{t.value}`")
                        else:
                            st.caption(f"**{t.step}**: {t.description}")


# ============================================================================
# TAB 2: QUOTE BUILDER
# ============================================================================
with tab2:
    if categories:
        with st.form("quote_form"):
            title = st.text_input("Project Title", value="New Project")
            description = st.text_area("Description", height=80)
            q_category = st.selectbox("Project Type", categories, key="quote_category")
            q_template = engine.catalog.find_active_template(q_category)
            q_features = st.multiselect("Features", [f.name for f in q_template.features], key="quote_features")
            q_complexity, q_timeline, q_design = tier_inputs("quote")
            days = st.number_input("Estimated Days (0 = derive from hours)", min_value=0, value=0, step=1)
            send_now = st.checkbox("Send to client immediately", value=True)
            submitted = st.form_submit_button("Generate Quote", type="primary")

        if submitted:
            try:
                quote = service.generate_quote(
                    client_id=client_id,
                    project_details=ProjectDetails(
                        title=title,
                        type=q_category,
                        description=description,
                        features=q_features,
                        design_type=q_design,
                        complexity=q_complexity,
                    ),
                    timeline=QuoteTimeline(estimated_days=int(days) or None, urgency=q_timeline),
                    status="sent" if send_now else "draft",
                )
                st.success(f"Quote {quote.quote_number} created")
                st.dataframe(
                    pd.DataFrame([
                        {
                            'Milestone': m.title,
                            'Days': m.estimated_days,
                            f'Amount ({quote.pricing.currency})': m.amount,
                        }
                        for m in quote.milestones
                    ]),
                    use_container_width=True,
                    hide_index=True
                )
            except TemplateNotFound as e:
                st.error(str(e))


# ============================================================================
# TAB 3: MY QUOTES
# ============================================================================
with tab3:
    quotes = service.list_quotes(client_id)
    if not quotes:
        st.info("No quotes yet.")
    for quote in quotes:
        status = quote.effective_status().value
        with st.expander(f"{quote.quote_number} | {quote.project_details.title} | {status.upper()}"):
            c1, c2, c3 = st.columns(3)
            c1.metric("Total", f"{quote.pricing.currency} {quote.pricing.total_amount:,.2f}")
            c2.metric("Days", quote.timeline.estimated_days)
            c3.metric("Valid Until", quote.valid_until.strftime('%Y-%m-%d'))

            b1, b2, b3 = st.columns(3)
            try:
                if b1.button("👁️ Open", key=f"view_{quote.quote_number}"):
                    service.get_quote(quote.quote_number, client_id)
                    st.rerun()
                if b2.button("✅ Accept", key=f"accept_{quote.quote_number}"):
                    service.accept(quote.quote_number, client_id)
                    st.rerun()
                if b3.button("❌ Reject", key=f"reject_{quote.quote_number}"):
                    service.reject(quote.quote_number, client_id, reason="Rejected from dashboard")
                    st.rerun()
            except InvalidTransition as e:
                st.warning(str(e))


# ============================================================================
# TAB 4: TEMPLATES
# ============================================================================
with tab4:
    st.subheader("📚 Rate Templates")
    st.dataframe(
        pd.DataFrame([
            {
                'Category': t.category,
                'Name': t.name,
                'Base Price (INR)': t.base_price,
                'Features': len(t.features),
                **{f'Complexity {k}': v for k, v in t.complexity_multipliers.items()},
            }
            for t in templates
        ]),
        use_container_width=True,
        hide_index=True
    )
    for t in templates:
        with st.expander(f"{t.name} features"):
            st.dataframe(
                pd.DataFrame([f.to_dict() for f in t.features]),
                use_container_width=True,
                hide_index=True
            )
