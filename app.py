import streamlit as st
import logging
from dotenv import load_dotenv

from pdf_mitra import (
    PageComposer,
    PdfMitraError,
    SourceImage,
    format_size,
    load_settings,
    merge_pdfs,
    split_pdf_to_zip,
    try_compose_images,
)
from pdf_mitra.config import log_level
from pdf_mitra.documents import IMAGES_FILENAME, MERGED_FILENAME, SPLIT_FILENAME

# --- PAGE CONFIGURATION ---
st.set_page_config(
    page_title="PDF मित्र – हिंदी PDF टूल्स",
    page_icon="📄",
    layout="wide",
    initial_sidebar_state="collapsed"
)

# --- CSS FOR POLISH ---
st.markdown("""
<style>
    .stButton>button { width: 100%; border-radius: 8px; height: 3em; font-weight: bold;}
    .hero {
        background: linear-gradient(90deg, #f97316 0%, #ffffff 50%, #16a34a 100%);
        border-radius: 12px; padding: 24px 28px; margin-bottom: 16px; color: #111;
    }
    .hero h1 { margin: 0; font-size: 2em; }
    .hero p  { margin: 4px 0 0; opacity: 0.8; }
    .status-line { color: #888; font-size: 0.9em; margin-top: 12px; }
</style>
""", unsafe_allow_html=True)

load_dotenv()

# Configure logging for debugging
logging.basicConfig(level=log_level(), format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

try:
    SETTINGS = load_settings()
    PageComposer(SETTINGS)  # rejects a margin that leaves no content area
except ValueError as e:
    st.error(f"⛔ **Setup Error:** {e}")
    logger.error(e)
    st.stop()

# Status strings: busy / success / error per operation
MESSAGES = {
    "merge": {
        "busy": "PDF जोड़ना जारी है…",
        "done": f"हो गया! {MERGED_FILENAME} तैयार है।",
        "error": "त्रुटि: फाइलें जोड़ते समय समस्या आई।",
    },
    "split": {
        "busy": "PDF विभाजित किया जा रहा है…",
        "done": f"हो गया! {SPLIT_FILENAME} तैयार है।",
        "error": "त्रुटि: विभाजन के दौरान समस्या आई।",
    },
    "img2pdf": {
        "busy": "इमेज से PDF बनाया जा रहा है…",
        "done": f"हो गया! {IMAGES_FILENAME} तैयार है।",
        "error": "त्रुटि: इमेज से PDF बनाते समय समस्या आई।",
    },
}
WAIT_LABEL = "कृपया प्रतीक्षा करें…"


def show_status():
    if st.session_state.get("status"):
        status_box.markdown(f'<div class="status-line">{st.session_state["status"]}</div>', unsafe_allow_html=True)


def set_status(op: str, key: str):
    st.session_state["status"] = MESSAGES[op][key]
    show_status()


def store_result(op: str, data: bytes, file_name: str, mime: str):
    st.session_state[f"{op}_result"] = {"data": data, "file_name": file_name, "mime": mime}


def clear_result(op: str):
    st.session_state.pop(f"{op}_result", None)


def render_download(op: str):
    result = st.session_state.get(f"{op}_result")
    if not result:
        return
    st.download_button(
        label=f"⬇️ {result['file_name']} ({format_size(len(result['data']))})",
        data=result["data"],
        file_name=result["file_name"],
        mime=result["mime"],
        type="primary",
        key=f"dl_{op}",
    )


# --- HEADER ---
st.markdown(
    '<div class="hero"><h1>PDF मित्र</h1>'
    '<p>हिंदी में सरल PDF टूल्स – जोड़ें, विभाजित करें, और इमेज से PDF।</p></div>',
    unsafe_allow_html=True,
)

# --- STATUS LINE (updated in place while an operation runs) ---
status_box = st.empty()
show_status()

tab_merge, tab_split, tab_img = st.tabs(["PDF जोड़ें", "PDF विभाजित करें", "इमेज → PDF"])

# ──────────────────────────────────────────────────────────────────────────────
# TAB 1: Merge
# ──────────────────────────────────────────────────────────────────────────────
with tab_merge:
    st.subheader("कई PDF फाइलें जोड़ें")
    st.caption("दो या अधिक PDF चुनें और एक फाइल में मिला दें।")

    merge_files = st.file_uploader(
        "PDF फाइलें", type=["pdf"], accept_multiple_files=True, key="merge_upload"
    )

    if st.button("जोड़ें और डाउनलोड करें", type="primary", key="btn_merge",
                 disabled=not merge_files or len(merge_files) < 2):
        clear_result("merge")
        set_status("merge", "busy")
        try:
            with st.spinner(WAIT_LABEL):
                merged = merge_pdfs(
                    [f.getvalue() for f in merge_files],
                    names=[f.name for f in merge_files],
                )
            store_result("merge", merged, MERGED_FILENAME, "application/pdf")
            set_status("merge", "done")
        except (PdfMitraError, ValueError) as e:
            logger.exception("Merge failed: %s", e)
            set_status("merge", "error")

    render_download("merge")

# ──────────────────────────────────────────────────────────────────────────────
# TAB 2: Split
# ──────────────────────────────────────────────────────────────────────────────
with tab_split:
    st.subheader("PDF को पन्नों में विभाजित करें")
    st.caption("प्रत्येक पन्ना अलग-अलग PDF के रूप में ZIP में डाउनलोड होगा।")

    split_file = st.file_uploader("PDF फाइल", type=["pdf"], key="split_upload")

    if st.button("विभाजित करें और ZIP डाउनलोड करें", type="primary", key="btn_split",
                 disabled=split_file is None):
        clear_result("split")
        set_status("split", "busy")
        try:
            with st.spinner(WAIT_LABEL):
                zip_bytes = split_pdf_to_zip(split_file.getvalue(), split_file.name)
            store_result("split", zip_bytes, SPLIT_FILENAME, "application/zip")
            set_status("split", "done")
        except PdfMitraError as e:
            logger.exception("Split failed: %s", e)
            set_status("split", "error")

    render_download("split")

# ──────────────────────────────────────────────────────────────────────────────
# TAB 3: Images → PDF
# ──────────────────────────────────────────────────────────────────────────────
with tab_img:
    st.subheader("इमेज से PDF बनाएँ")
    st.caption("JPEG/PNG इमेज चुनें। हर इमेज को एक पन्ने पर फिट किया जाएगा।")

    image_files = st.file_uploader(
        "इमेज फाइलें",
        type=["jpg", "jpeg", "png", "webp", "bmp", "gif", "tiff"],
        accept_multiple_files=True,
        key="img_upload",
    )

    if st.button("PDF बनाएँ और डाउनलोड करें", type="primary", key="btn_img",
                 disabled=not image_files):
        clear_result("img2pdf")
        set_status("img2pdf", "busy")
        sources = [SourceImage(f.name, f.getvalue(), f.type or "") for f in image_files]
        progress = st.progress(0.0)
        result = try_compose_images(
            sources,
            SETTINGS,
            progress_cb=lambda done, total: progress.progress(done / total),
        )
        progress.empty()
        if result.ok and result.data:
            store_result("img2pdf", result.data, IMAGES_FILENAME, "application/pdf")
            set_status("img2pdf", "done")
        elif not result.ok:
            set_status("img2pdf", "error")

    render_download("img2pdf")

