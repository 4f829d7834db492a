from typing import Optional

from pitchgen.prompts.pitch import FALLBACK_TEMPLATE


def generate_fallback_pitch(problem: str, solution: str,
                            target_audience: Optional[str] = None) -> str:
    """
    Build a deterministic pitch from the inputs alone.

    The problem and solution are embedded verbatim; the audience phrase is
    only added when an audience was given. Performs no I/O and never raises.
    """
    audience = f" for {target_audience}" if target_audience else ""
    return FALLBACK_TEMPLATE.format(audience=audience, problem=problem, solution=solution)


class TemplatePitchWriter:
    """Terminal generation stage wrapping generate_fallback_pitch."""
    name = "template"

    async def generate(self, problem: str, solution: str,
                       target_audience: Optional[str] = None) -> str:
        return generate_fallback_pitch(problem, solution, target_audience)
