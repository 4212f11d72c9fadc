import os
from typing import Dict, Iterable, Mapping, Optional

from aws_cdk import Stack, Tags
from constructs import Construct


class BaseServiceStack(Stack):
    """Base CDK Stack for the Lambda services in this repo.

    Provides common tagging, exposes self.env_name, and builds the Lambda
    environment from whitelisted variables present at synth time.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        service_name: str,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)
        self.service_name = service_name
        self.env_name = self.node.try_get_context("env_name") or "dev"

        Tags.of(self).add("Service", service_name)
        Tags.of(self).add("ManagedBy", "CDK")
        Tags.of(self).add("Environment", self.env_name)

    def function_name(self, base: str) -> str:
        return f"{base}-{self.env_name}"

    def function_environment(
        self,
        names: Iterable[str],
        source: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        """Pick ``names`` from CDK context first, then the synth environment."""
        source = os.environ if source is None else source
        environment = {}
        for name in names:
            value = self.node.try_get_context(name) or source.get(name)
            if value:
                environment[name] = str(value)
        return environment
