import os
from dotenv import load_dotenv

from employee_sorter.errors import MissingCredential

load_dotenv()

GROQ_API_KEY = os.getenv("GROQ_API_KEY")

# Vision-capable, lower-latency tier: resume analysis and ranking
ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct")
# Higher-capability tier: task distribution
DISTRIBUTION_MODEL = os.getenv("DISTRIBUTION_MODEL", "llama-3.3-70b-versatile")

try:
    LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
except ValueError:
    LLM_TEMPERATURE = 0.2

# Groq vision models accept at most five images per request
try:
    MAX_ANALYSIS_PAGES = int(os.getenv("MAX_ANALYSIS_PAGES", "5"))
except ValueError:
    MAX_ANALYSIS_PAGES = 5

PDF_MIME_TYPE = "application/pdf"
IMAGE_MIME_TYPE = "image/jpeg"
RENDER_SCALE = 1.5

NOTIFICATION_SECONDS = 7

UNRANKED_RANK = 0
UNRANKED_JUSTIFICATION = "Not ranked"


def require_api_key() -> str:
    """
    Returns the Groq credential or raises MissingCredential.
    Reads the environment at call time so a late .env / export is honoured.
    """
    key = (os.getenv("GROQ_API_KEY") or GROQ_API_KEY or "").strip()
    if not key:
        raise MissingCredential()
    return key
