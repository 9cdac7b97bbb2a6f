"""Prompt text for the summary and Q&A agents."""

import json

from analysis_hub.models import Summary

SUMMARY_DESCRIPTION = "You are an expert document analyst."

SUMMARY_INSTRUCTIONS = [
    "Analyze the document provided by the user and produce a structured summary.",
    "Respond with a single JSON object that matches the given JSON schema exactly.",
    "Keep the tldr to one or two sentences and list at most 7 bullet points.",
    "Extract entities in the order they appear, with a short supporting snippet for each.",
]

SUMMARY_PROMPT = """Please analyze the following document and provide a structured summary. \
Extract the key information as requested in the JSON schema.

JSON schema:
{schema}

Document:
---
{document}
---
"""

GROUNDING_INSTRUCTION = """You are an expert Q&A assistant. Your task is to answer questions \
based *only* on the content of a document provided by the user. Do not use any external \
knowledge. If the information to answer a question is not present in the document, you must \
state that you cannot find the answer in the provided text. Be concise and helpful.

The document content is as follows:
---
{document}
---"""

SUMMARY_GREETING = (
    "I've summarized the document for you. Feel free to ask me any questions about it."
)


def summary_prompt(document_text: str) -> str:
    """Build the summarization request for a document."""
    schema = json.dumps(Summary.model_json_schema(), indent=2)
    return SUMMARY_PROMPT.format(schema=schema, document=document_text)


def grounding_instruction(document_text: str) -> str:
    """Build the system instruction that pins answers to the document."""
    return GROUNDING_INSTRUCTION.format(document=document_text)
