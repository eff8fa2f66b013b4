from models import Style

SYSTEM_PROMPT = "You are a helpful assistant that summarizes content."

# ============================ HOSTED (GROQ) ============================
GROQ_PROMPTS = {
    Style.TLDR: "Summarize the following text in short and brief TL;DR:\n\n{text}",
    Style.BULLET: "Summarize the following text into few bullet points:\n\n{text}",
    Style.ELI5: "Explain this like I'm 5 in few simple sentences:\n\n{text}",
}

# ============================ LOCAL (OLLAMA) ============================
OLLAMA_PROMPTS = {
    Style.TLDR: "Summarize the following text in a short and brief TL;DR:\n\n{text}",
    Style.BULLET: "Summarize the following text into a few bullet points:\n\n{text}",
    Style.ELI5: "Explain this like I'm 5 in a few simple sentences:\n\n{text}",
}


def build_prompt(templates: dict, style: Style, text: str) -> str:
    # str.replace keeps braces in user text intact
    return templates[Style(style)].replace("{text}", text)
