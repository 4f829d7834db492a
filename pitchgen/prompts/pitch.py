"""
Prompt configuration for pitch generation
"""

from typing import Optional

# Used when the request carries no target audience
DEFAULT_AUDIENCE = "General audience"

# Direct generation prompt
PITCH_PROMPT = """Create a compelling, professional pitch based on the following information:

Problem: {problem}
Solution: {solution}
Target Audience: {target_audience}

Please create a pitch that:
1. Clearly articulates the problem
2. Presents the solution in an engaging way
3. Explains why this solution matters
4. Includes a call to action
5. Is professional and persuasive

Format the response with clear sections and bullet points where appropriate."""

# Template fallback, used when no remote stage produced a pitch
FALLBACK_TEMPLATE = """Here's a compelling pitch{audience}:

**The Problem:**
{problem}

**Our Solution:**
{solution}

**Why This Matters:**
This solution directly addresses the core issue you're facing, providing a clear path forward that delivers measurable results.

**Next Steps:**
Let's discuss how we can implement this solution and start seeing results immediately."""


def build_pitch_prompt(problem: str, solution: str, target_audience: Optional[str] = None) -> str:
    return PITCH_PROMPT.format(
        problem=problem,
        solution=solution,
        target_audience=target_audience or DEFAULT_AUDIENCE,
    )
