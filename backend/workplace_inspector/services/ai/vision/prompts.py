"""Per-mode instruction templates for workplace photo analysis.

Each template carries a workplace gate: when the photo does not show the
target domain, the model must answer with a fixed "not applicable" block and
stop. Otherwise it answers with the same five markers, filled in.
"""

from __future__ import annotations

from dataclasses import dataclass

from workplace_inspector.services.ai.common.sections import marker

from .contracts import (
    POSSIBLE_ISSUES,
    RISK_LEVEL,
    WHAT_I_SEE,
    WHAT_THIS_MEANS,
    WHAT_YOU_CAN_DO_NEXT,
    AnalysisMode,
    parse_mode,
)


@dataclass(frozen=True)
class ModePrompt:
    role: str
    not_domain_examples: str
    gate_subject: str
    fallback_what_i_see: str
    fallback_what_this_means: str
    fallback_next_steps: tuple[str, str]
    fallback_risk_reason: str
    domain_label: str
    what_i_see_hint: str
    what_this_means_hint: str
    issues_hint: str
    next_steps_hint: str


MODE_PROMPTS: dict[AnalysisMode, ModePrompt] = {
    AnalysisMode.KITCHEN: ModePrompt(
        role="You are an AI kitchen & food-safety inspector (HACCP mindset).",
        gate_subject="a real kitchen/food prep area/cold room/food storage room",
        not_domain_examples="a clothing ad, product photo, selfie",
        fallback_what_i_see="This image does not appear to show a kitchen or food-related workplace.",
        fallback_what_this_means="Food safety analysis is not applicable for this image.",
        fallback_next_steps=(
            "Upload a real photo from a kitchen, prep area, cold room, or food storage area.",
            "Make sure surfaces, containers, food items, or equipment are visible.",
        ),
        fallback_risk_reason="no food-safety risks can be assessed from this image.",
        domain_label="a food-related workplace",
        what_i_see_hint=(
            "Describe only what is visible (food items, surfaces, equipment, storage, "
            "containers, floor condition, cleanliness)."
        ),
        what_this_means_hint=(
            "Explain what type of area this likely is (prep, storage, cold room, "
            "dishwashing, etc.) and why."
        ),
        issues_hint=(
            'Use "-" bullets. Focus on:\n'
            "- cross-contamination risks\n"
            "- uncovered food/open containers\n"
            "- labeling/dating absence\n"
            "- spills/residue/dirty surfaces\n"
            "- improper storage (on floor, near chemicals, etc.)\n"
            "- pest risk indicators\n"
            "- temperature control risk ONLY if a cooling/storage unit is visible or implied"
        ),
        next_steps_hint="Give practical steps starting with 1) 2) 3)",
    ),
    AnalysisMode.WAREHOUSE: ModePrompt(
        role="You are an AI workplace safety inspector for warehouses and storage areas.",
        gate_subject="a real warehouse/storage/industrial workplace",
        not_domain_examples="a product photo, clothing ad, selfie, random object",
        fallback_what_i_see="This image does not appear to show a warehouse or storage workplace.",
        fallback_what_this_means="Warehouse/storage safety analysis is not applicable for this image.",
        fallback_next_steps=(
            "Upload a real photo of a warehouse, storage room, loading area, or industrial workspace.",
            "Ensure storage, walkways, exits, or equipment are visible.",
        ),
        fallback_risk_reason="no workplace hazards can be assessed from this image.",
        domain_label="a warehouse/storage workplace",
        what_i_see_hint="Objective description only.",
        what_this_means_hint="Operational context of what is shown.",
        issues_hint=(
            'Use "-" bullets. Focus on: unsafe stacking, blocked exits, trip hazards, '
            "spills/leaks, labeling/signage, equipment safety, pests if relevant, "
            "temperature control if relevant."
        ),
        next_steps_hint="Steps as 1) 2) 3)",
    ),
    AnalysisMode.OFFICE: ModePrompt(
        role="You are an AI workplace safety assistant for office environments.",
        gate_subject="a real office/workplace scene",
        not_domain_examples="a product photo, clothing ad, selfie",
        fallback_what_i_see="This image does not appear to show an office workplace.",
        fallback_what_this_means="Office safety/ergonomic analysis is not applicable for this image.",
        fallback_next_steps=(
            "Upload a real photo of an office area (desk, walkway, cables, equipment).",
            "Ensure the work setup is visible.",
        ),
        fallback_risk_reason="no office hazards can be assessed from this image.",
        domain_label="an office scene",
        what_i_see_hint="Objective description only.",
        what_this_means_hint="Explain the office context.",
        issues_hint=(
            'Use "-" bullets. Focus on: cable trip hazards, ergonomics, blocked '
            "walkways/exits, electrical overload, fire safety, clutter, lighting."
        ),
        next_steps_hint="Steps as 1) 2) 3)",
    ),
}


def fallback_block(mode: AnalysisMode | str | None) -> str:
    """Return the fixed "not applicable" reply the gate clause asks for."""
    p = MODE_PROMPTS[parse_mode(mode)]
    step1, step2 = p.fallback_next_steps
    return (
        f"{marker(WHAT_I_SEE)}\n{p.fallback_what_i_see}\n\n"
        f"{marker(WHAT_THIS_MEANS)}\n{p.fallback_what_this_means}\n\n"
        f"{marker(POSSIBLE_ISSUES)}\n- Not applicable.\n\n"
        f"{marker(WHAT_YOU_CAN_DO_NEXT)}\n1) {step1}\n2) {step2}\n\n"
        f"{marker(RISK_LEVEL)}\nLOW - {p.fallback_risk_reason}"
    )


def get_prompt_for_mode(mode: AnalysisMode | str | None) -> str:
    """Build the full instruction text for *mode* (kitchen when unrecognized)."""
    resolved = parse_mode(mode)
    p = MODE_PROMPTS[resolved]

    return (
        f"{p.role}\n\n"
        "CRITICAL RULE (WORKPLACE GATE):\n"
        f"If the image is NOT {p.gate_subject} (e.g., it is {p.not_domain_examples}),\n"
        "then respond with EXACTLY this and stop:\n\n"
        f"{fallback_block(resolved)}\n\n"
        "--- END ---\n\n"
        f"If it IS {p.domain_label}, respond using EXACT markers below.\n"
        "Do NOT use markdown (no **bold**, no ###). Do NOT include instructions or placeholders.\n\n"
        "Return in this exact format:\n\n"
        f"{marker(WHAT_I_SEE)}\n{p.what_i_see_hint}\n\n"
        f"{marker(WHAT_THIS_MEANS)}\n{p.what_this_means_hint}\n\n"
        f"{marker(POSSIBLE_ISSUES)}\n{p.issues_hint}\n\n"
        f"{marker(WHAT_YOU_CAN_DO_NEXT)}\n{p.next_steps_hint}\n\n"
        f"{marker(RISK_LEVEL)}\nLOW / MEDIUM / HIGH - short reason.\n\n"
        "Be conservative. If unsure, say so."
    )
