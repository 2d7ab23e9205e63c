# Role: Streamlit chat UI.
# - Backend is authoritative (chat + snapshot).
# - Sidebar shows ONLY a human-readable profile progress card.

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import requests
import streamlit as st

BACKEND_URL = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")
DEFAULT_PHONE = "919876543210"


# ----------------------------
# Session helpers
# ----------------------------
def ensure_session() -> None:
    if "phone" not in st.session_state:
        st.session_state["phone"] = DEFAULT_PHONE
    if "messages" not in st.session_state:
        st.session_state["messages"] = []
    if "busy" not in st.session_state:
        st.session_state["busy"] = False
    if "snapshot" not in st.session_state:
        st.session_state["snapshot"] = None


# ----------------------------
# Backend calls
# ----------------------------
def send_to_backend(phone: str, message: str) -> str:
    resp = requests.post(
        f"{BACKEND_URL}/chat",
        json={"phone": phone, "message": message},
        timeout=60,
    )
    resp.raise_for_status()
    return resp.json()["reply"]


def fetch_snapshot(phone: str) -> Optional[Dict[str, Any]]:
    try:
        r = requests.get(f"{BACKEND_URL}/state/{phone}", timeout=10)
        if r.status_code != 200:
            return None
        return r.json()
    except requests.RequestException:
        return None


def reset_backend_session(phone: str) -> None:
    try:
        requests.delete(f"{BACKEND_URL}/state/{phone}", timeout=10)
    except requests.RequestException:
        st.sidebar.warning("Could not reset the backend session.")


# ----------------------------
# UI polish
# ----------------------------
def inject_css() -> None:
    st.markdown(
        """
<style>
.block-container { max-width: 1100px; padding-top: 2rem; padding-bottom: 2rem; }
section[data-testid="stSidebar"] .block-container { padding-top: 1.25rem; }

.stButton>button {
  border-radius: 12px !important;
  padding: 0.60rem 0.90rem !important;
  font-weight: 650 !important;
}

.jy-card {
  border: 1px solid rgba(49, 51, 63, 0.14);
  border-radius: 16px;
  padding: 14px 14px;
  background: rgba(255, 255, 255, 0.02);
}
.jy-title { font-size: 0.95rem; font-weight: 750; opacity: 0.9; margin-bottom: 10px; }
.jy-row {
  padding: 8px 10px;
  border: 1px solid rgba(49, 51, 63, 0.10);
  border-radius: 12px;
  margin-bottom: 8px;
}
.jy-k { font-size: 0.85rem; opacity: 0.72; }
.jy-v { font-size: 1.0rem; font-weight: 700; }

div[data-testid="stChatInput"] textarea { min-height: 44px; }
</style>
""",
        unsafe_allow_html=True,
    )


# ----------------------------
# Formatting helpers
# ----------------------------
def _pretty_field(name: Optional[str]) -> str:
    if not name:
        return "—"
    return name.replace("_", " ").title()


def _row(label: str, value: str) -> str:
    return f"""
<div class="jy-row">
  <div class="jy-k">{label}</div>
  <div class="jy-v">{value}</div>
</div>
"""


# ----------------------------
# Sidebar: profile progress ONLY
# ----------------------------
def render_profile_card(snapshot: Dict[str, Any]) -> None:
    if not snapshot.get("registered"):
        st.sidebar.warning("This number is not registered.")
        return

    session = snapshot.get("session") or {}
    percent = int(snapshot.get("completion_percentage") or 0)
    current = session.get("current_field")
    missing = snapshot.get("incomplete_fields") or []

    full_html = f"""
<div class="jy-card">
<div class="jy-title">{snapshot.get("display_name") or "Your profile"}</div>
{_row("Completion", f"{percent}%")}
{_row("Search access", "✅ Unlocked" if snapshot.get("can_search") else "🔒 Locked")}
{_row("Now collecting", _pretty_field(current))}
{_row("Still missing", str(len(missing)))}
</div>
"""
    st.sidebar.markdown(full_html, unsafe_allow_html=True)
    st.sidebar.progress(min(max(percent, 0), 100) / 100)


def render_sidebar() -> None:
    st.sidebar.title("Your profile")

    phone = st.sidebar.text_input("Phone", value=st.session_state["phone"], disabled=st.session_state["busy"])
    if phone and phone != st.session_state["phone"]:
        st.session_state["phone"] = phone.strip()
        st.session_state["messages"] = []
        st.session_state["snapshot"] = fetch_snapshot(st.session_state["phone"])

    col1, col2 = st.sidebar.columns(2)
    with col1:
        if st.button("📝 New chat", use_container_width=True, disabled=st.session_state["busy"]):
            reset_backend_session(st.session_state["phone"])
            st.session_state["messages"] = []
            st.session_state["snapshot"] = None
            st.rerun()

    with col2:
        if st.button("↻ Refresh", use_container_width=True, disabled=st.session_state["busy"]):
            st.session_state["snapshot"] = fetch_snapshot(st.session_state["phone"])
            st.rerun()

    st.sidebar.divider()

    snap = st.session_state.get("snapshot")
    if not snap:
        st.sidebar.info("Say hi to see your profile progress.")
        return

    render_profile_card(snap)


# ----------------------------
# Chat
# ----------------------------
def render_chat() -> None:
    for msg in st.session_state["messages"]:
        with st.chat_message(msg["role"]):
            st.write(msg["content"])


# ----------------------------
# Main
# ----------------------------
def main() -> None:
    st.set_page_config(page_title="JY Alumni Bot", page_icon="🤝", layout="wide")
    inject_css()

    st.title("🤝 JY Alumni Bot")
    st.caption("Complete your profile, then search the alumni network for expertise.")

    ensure_session()
    render_sidebar()
    render_chat()

    user_input = st.chat_input("Type a message…", disabled=st.session_state["busy"])
    if not user_input:
        return

    st.session_state["messages"].append({"role": "user", "content": user_input})
    with st.chat_message("user"):
        st.write(user_input)

    st.session_state["busy"] = True
    try:
        with st.spinner("Thinking..."):
            reply = send_to_backend(st.session_state["phone"], user_input)

        st.session_state["messages"].append({"role": "assistant", "content": reply})
        with st.chat_message("assistant"):
            st.write(reply)

        # Refresh snapshot after each turn
        st.session_state["snapshot"] = fetch_snapshot(st.session_state["phone"])

    except requests.RequestException:
        msg = f"I couldn't reach the backend. Make sure the API is running on {BACKEND_URL}."
        st.session_state["messages"].append({"role": "assistant", "content": msg})
        with st.chat_message("assistant"):
            st.error(msg)
    finally:
        st.session_state["busy"] = False


if __name__ == "__main__":
    main()
