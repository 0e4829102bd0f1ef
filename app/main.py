"""
Streamlit Frontend for Sales Tracker

The page users work with to record income and expenses, browse the
ledger and pull analytics.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages for rejected input
3. Exports are downloaded straight from memory, no temporary files
"""

import asyncio
from datetime import date

import streamlit as st

from sales_tracker.analytics import (
    ALLOWED_SORT_FIELDS,
    ClientError,
    CsvSchema,
    SerializationError,
)
from sales_tracker.config import get_settings
from sales_tracker.models.entry import EntryType
from sales_tracker.orchestrator import TrackerService, create_app_components
from sales_tracker.services.storage import NotFoundError, StorageError
from sales_tracker.validation import EntryValidationError


# Page configuration
st.set_page_config(
    page_title="Sales Tracker",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    service, _ = get_components()

    st.sidebar.title("📒 Sales Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Add Entry", "📋 Entries", "📊 Analytics", "⚙️ Settings"],
        index=0,
    )

    if page == "➕ Add Entry":
        render_add_page(service)
    elif page == "📋 Entries":
        render_entries_page(service)
    elif page == "📊 Analytics":
        render_analytics_page(service)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_add_page(service: TrackerService):
    """Render the entry form."""
    st.title("➕ Add Entry")

    with st.form("add_entry"):
        entry_type = st.selectbox(
            "Type",
            options=list(EntryType),
            format_func=lambda t: t.value.title(),
        )
        amount = st.number_input("Amount", min_value=0, step=1, value=0)
        entry_date = st.date_input("Date", value=date.today())
        category = st.text_input("Category")
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        try:
            entry = run_async(service.create_entry({
                "type": entry_type.value,
                "amount": int(amount),
                "date": entry_date.isoformat(),
                "category": category,
            }))
            st.success(f"Saved entry #{entry.id}: {entry.type.value} of {entry.amount}")
        except EntryValidationError as e:
            for issue in e.result.issues:
                st.error(issue.message)
        except StorageError as e:
            st.error(f"Could not save entry: {e}")


def render_entries_page(service: TrackerService):
    """Render the sortable entry listing with plain CSV export."""
    st.title("📋 Entries")

    sort_by = st.multiselect(
        "Sort by (first field has priority)",
        options=sorted(ALLOWED_SORT_FIELDS),
    )

    try:
        entries = run_async(service.list_entries(sort_by))
    except ClientError as e:
        st.error(str(e))
        return
    except StorageError as e:
        st.error(f"Could not load entries: {e}")
        return

    if not entries:
        st.info("No entries yet. Use the 'Add Entry' page to record one.")
        return

    st.dataframe(
        [entry.model_dump(mode="json") for entry in entries],
        use_container_width=True,
    )

    try:
        payload = service.render_export(entries, CsvSchema.PLAIN)
        st.download_button(
            "⬇️ Download CSV",
            data=payload,
            file_name=get_settings().app.listing_export_filename,
            mime="text/csv",
        )
    except SerializationError as e:
        st.error(f"Could not build export: {e}")

    with st.expander("🗑️ Delete an entry"):
        entry_id = st.number_input("Entry ID", min_value=1, step=1)
        if st.button("Delete"):
            try:
                run_async(service.delete_entry(int(entry_id)))
                st.success(f"Deleted entry #{int(entry_id)}")
                st.rerun()
            except NotFoundError as e:
                st.error(str(e))


def render_analytics_page(service: TrackerService):
    """Render range statistics with aggregated CSV export."""
    st.title("📊 Analytics")

    col1, col2 = st.columns(2)
    with col1:
        date_from = st.text_input("From (YYYY-MM-DD)", value="")
    with col2:
        date_to = st.text_input("To (YYYY-MM-DD)", value="")

    # One read: metrics, table and download all come from the same rows
    try:
        rows = run_async(service.get_aggregated(date_from, date_to))
    except ClientError as e:
        st.error(str(e))
        return
    except StorageError as e:
        st.error(f"Could not load entries: {e}")
        return

    if not rows:
        st.info("No entries in this range.")
        return

    stats = rows[0].stats
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Sum", stats.sum)
    c2.metric("Average", f"{stats.average:.2f}")
    c3.metric("Count", stats.count)
    c4.metric("Median", f"{stats.median:.2f}")
    c5.metric("90th percentile", f"{stats.percentile_90:.2f}")

    st.dataframe(
        [row.entry.model_dump(mode="json") for row in rows],
        use_container_width=True,
    )

    try:
        payload = service.render_export(rows, CsvSchema.AGGREGATED)
        st.download_button(
            "⬇️ Download aggregated CSV",
            data=payload,
            file_name=get_settings().app.aggregated_export_filename,
            mime="text/csv",
        )
    except SerializationError as e:
        st.error(f"Could not build export: {e}")


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    from sales_tracker.config import validate_all_settings

    status = validate_all_settings()
    st.markdown(f"**Storage backend:** {get_settings().app.storage_backend}")

    services = [
        ("Application settings", "app"),
        ("Google Sheets (Storage)", "google_sheets"),
    ]

    for name, key in services:
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "Set `STORAGE_BACKEND=google_sheets` together with the "
        "`GOOGLE_SHEETS_*` variables to persist entries in a spreadsheet."
    )


if __name__ == "__main__":
    main()
