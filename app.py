import asyncio
import threading
from pathlib import Path

import streamlit as st

from profile_rag.exceptions import InputValidationError, ProfileRagError
from profile_rag.logger import APP_LOG_PATH, ERR_LOG_PATH, get_logger
from profile_rag.models import ArticleRequest, AssistantResponse
from profile_rag.pipeline.assistant import ProfileAssistant

log = get_logger()


class AssistantRunner:
    """
    Owns one ProfileAssistant and a private event loop on a daemon thread.

    Streamlit reruns the script in fresh threads; the provider HTTP clients and
    the single-flight seeding task need one long-lived loop, so every
    coroutine is submitted to that loop instead of asyncio.run().
    """

    def __init__(self):
        # a config or knowledge-base error must raise before any thread exists
        self.assistant = ProfileAssistant.from_settings()
        self.loop = asyncio.new_event_loop()
        threading.Thread(target=self.loop.run_forever, daemon=True).start()

    def run(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result()


@st.cache_resource(show_spinner=False)
def get_runner() -> AssistantRunner:
    # cached for the process lifetime, so the index is seeded once, not per rerun
    return AssistantRunner()


def tail_file(path: Path, max_lines: int = 200) -> str:
    """
    Read last max_lines from a log file.
    """
    if not path.exists():
        return ""
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        lines = f.readlines()[-max_lines:]
    return "".join(lines)


def render_result(resp: AssistantResponse):
    """
    Confidence, evidence paths and the raw matches (score, path, text).
    """
    st.metric("Confidence", resp.confidence.value)

    if resp.degraded:
        st.warning("Search was unavailable, so this was written without profile evidence.")

    if resp.evidence:
        st.caption("Evidence: " + ", ".join(resp.evidence))

    st.subheader("Matches (debug)")
    if not resp.matches:
        st.info("No matching profile entries.")
        return

    for idx, m in enumerate(resp.matches, start=1):
        with st.expander(f"{idx}. {m.path} | score {m.score:.3f}"):
            st.text(m.text)


def run_safely(runner: AssistantRunner, coro) -> AssistantResponse | None:
    try:
        return runner.run(coro)
    except InputValidationError as e:
        st.warning(e.message)
    except ProfileRagError as e:
        log.error("UI request failed: %s", e)
        st.error("Internal server error. Please try again.")
    return None


def main():
    st.set_page_config(page_title="Profile Assistant", layout="wide")

    try:
        runner = get_runner()
    except ProfileRagError as e:
        log.error("Could not start the assistant: %s", e)
        st.error(f"Could not start the assistant: {e.message}")
        return

    col_left, col_right = st.columns([2, 1])

    # -------------------------------------------------
    # LEFT SIDE: article form + question box
    # -------------------------------------------------
    with col_left:
        tab_article, tab_ask = st.tabs(["Write an article", "Ask the profile"])

        with tab_article:
            with st.form("article_form"):
                title = st.text_input("Project title")
                date = st.text_input("Date")
                club = st.text_input("Organized by")
                narrative = st.text_area("Project details", height=160)
                submitted = st.form_submit_button("Generate article")

            if submitted:
                request = ArticleRequest(project_title=title, project_date=date, club=club, narrative=narrative)
                log.info("UI article request: title=%r", request.project_title)

                with st.spinner("Writing..."):
                    resp = run_safely(runner, runner.assistant.write_article(request))

                if resp is not None:
                    st.subheader("Article")
                    st.markdown(resp.answer)
                    st.download_button(
                        "Download as Markdown",
                        data=resp.answer,
                        file_name="article.md",
                        mime="text/markdown",
                    )
                    render_result(resp)

        with tab_ask:
            question = st.text_input(
                "Your question",
                placeholder="e.g. What projects has this person led?",
            )

            if st.button("Ask"):
                if not question.strip():
                    st.warning("Please enter a question.")
                else:
                    log.info("UI question: %r", question)

                    with st.spinner("Searching..."):
                        resp = run_safely(runner, runner.assistant.ask(question))

                    if resp is not None:
                        st.subheader("Answer")
                        st.success(resp.answer)
                        render_result(resp)

    # -------------------------------------------------
    # RIGHT SIDE: logs
    # -------------------------------------------------
    with col_right:
        st.subheader("Logs")
        tabs = st.tabs(["app.log", "error.log"])

        with tabs[0]:
            app_tail = tail_file(APP_LOG_PATH, max_lines=200)
            if app_tail.strip():
                st.text_area("app.log (last 200 lines)", app_tail, height=300)
            else:
                st.info("No app.log yet.")

        with tabs[1]:
            err_tail = tail_file(ERR_LOG_PATH, max_lines=200)
            if err_tail.strip():
                st.text_area("error.log (last 200 lines)", err_tail, height=300)
            else:
                st.info("No error.log yet.")


if __name__ == "__main__":
    main()
