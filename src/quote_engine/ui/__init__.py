"""Streamlit UI subpackage."""
