import logging
from typing import List, Optional, Protocol

from pitchgen.config import Settings
from pitchgen.errors import ConfigurationError, UpstreamError
from pitchgen.fallback import TemplatePitchWriter
from pitchgen.llm import GeminiPitchWriter
from pitchgen.models import GeneratedPitch
from pitchgen.webhook import WorkflowWebhookClient

logger = logging.getLogger(__name__)


class PitchWriter(Protocol):
    name: str

    async def generate(self, problem: str, solution: str,
                       target_audience: Optional[str] = None) -> str:
        ...


class PitchOrchestrator:
    """
    Runs the pitch generation stages in a fixed order.

    Remote stages are tried one at a time, each at most once, and the first
    one to return text wins. When every remote stage fails, or none is
    configured, the template writer produces the pitch, so generate() always
    returns.
    """

    def __init__(self,
                 webhook: Optional[WorkflowWebhookClient] = None,
                 gemini: Optional[GeminiPitchWriter] = None,
                 fallback: Optional[PitchWriter] = None):
        self.webhook = webhook
        self.gemini = gemini
        self.fallback = fallback or TemplatePitchWriter()

    @classmethod
    def from_settings(cls, settings: Settings) -> "PitchOrchestrator":
        return cls(
            webhook=WorkflowWebhookClient(
                url=settings.webhook_url,
                timeout=settings.outbound_timeout,
            ),
            gemini=GeminiPitchWriter(
                api_key=settings.gemini_api_key,
                model_name=settings.gemini_model,
                timeout=settings.outbound_timeout,
            ),
        )

    @property
    def strategies(self) -> List[PitchWriter]:
        """Configured remote stages, in attempt order."""
        stages = []
        for stage in (self.webhook, self.gemini):
            if stage is not None and stage.is_configured:
                stages.append(stage)
        return stages

    @property
    def has_remote_strategy(self) -> bool:
        return bool(self.strategies)

    async def generate(self, problem: str, solution: str,
                       target_audience: Optional[str] = None) -> GeneratedPitch:
        for stage in self.strategies:
            logger.info(f"Attempting {stage.name} stage")
            try:
                text = await stage.generate(problem, solution, target_audience)
            except (UpstreamError, ConfigurationError) as e:
                logger.warning(f"{stage.name} stage failed: {e}")
                continue
            except Exception:
                logger.exception(f"{stage.name} stage failed unexpectedly")
                continue
            logger.info(f"{stage.name} stage succeeded")
            return GeneratedPitch(text=text, strategy=stage.name)

        logger.info("Using template fallback pitch generation")
        text = await self.fallback.generate(problem, solution, target_audience)
        return GeneratedPitch(text=text, strategy=self.fallback.name)
