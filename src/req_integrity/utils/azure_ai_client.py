"""
Azure AI Client
===============

Unified client for the Azure AI services used by the integrity analysis.

Azure OpenAI models are called through the Responses API. Azure AI Foundation
models only offer chat completions; their answer is normalised into the same
"output items" shape, so callers handle a single response format:

    {"output": [{"type": "message", "content": [{"type": "output_text", "text": "..."}]}],
     "usage": {"input_tokens": int, "output_tokens": int}}
"""

import os
from typing import Dict, Optional, Any, List

# The official OpenAI library for interacting with Azure OpenAI
from openai import AzureOpenAI

# Specific clients for Azure AI Foundation Models
from azure.ai.inference import ChatCompletionsClient
from azure.ai.inference.models import SystemMessage, UserMessage
from azure.core.credentials import AzureKeyCredential


class AzureAIClient:
    """
    Routes prompts to Azure OpenAI or Azure AI Foundation depending on the model name.
    """
    AZURE_OPENAI_MODELS = ["gpt-4.1", "gpt-4.1-mini", "gpt-4o", "o3-mini", "o4-mini"]
    AZURE_AI_FOUNDATION_MODELS = ["DeepSeek-V3-0324", "DeepSeek-R1-0528", "Llama-3.3-70B-Instruct", "mistral-medium-2505", "Phi-4"]
    OPENAI_REASONING_MODELS = ["o3-mini", "o4-mini"]

    def __init__(self, system_prompt: str = "You are a helpful assistant.",
                 openai_client: Optional[AzureOpenAI] = None,
                 foundation_client: Optional[ChatCompletionsClient] = None):
        """
        Args:
            system_prompt (str): The default system message to send to the AI.
            openai_client: Pre-built Azure OpenAI client; created from the
                environment on first use when omitted.
            foundation_client: Pre-built Azure AI Foundation client; created
                from the environment on first use when omitted.
        """
        self.system_prompt = system_prompt
        self.openai_client = openai_client
        self.foundation_client = foundation_client

    def get_available_models(self) -> Dict[str, List[str]]:
        return {
            "Azure OpenAI": self.AZURE_OPENAI_MODELS,
            "Azure AI Foundation": self.AZURE_AI_FOUNDATION_MODELS
        }

    def _initialize_openai_client(self):
        """Initializes the Azure OpenAI client if it hasn't been already."""
        if self.openai_client is None:
            self.openai_client = AzureOpenAI(
                api_key=os.environ.get("AZURE_OPENAI_API_KEY"),
                api_version=os.environ.get("AZURE_OPENAI_API_VERSION"),
                azure_endpoint=os.environ.get("AZURE_OPENAI_ENDPOINT"),
                timeout=60.0
            )

    def _initialize_foundation_client(self):
        """Initializes the Azure AI Foundation client if it hasn't been already."""
        if self.foundation_client is None:
            self.foundation_client = ChatCompletionsClient(
                endpoint=os.environ.get("AZURE_AIFOUNDRY_ENDPOINT"),
                credential=AzureKeyCredential(os.environ.get("AZURE_AIFOUNDRY_API_KEY", "")),
            )

    def _is_reasoning_model(self, model_name: str) -> bool:
        return any(model_name.startswith(rm) for rm in self.OPENAI_REASONING_MODELS)

    def respond(self,
                model_name: str,
                user_prompt: str,
                temperature: float = 0,
                max_tokens: int = 2048) -> Dict[str, Any]:
        """
        Sends a single prompt and returns the raw output items.

        Args:
            model_name (str): The name of the model to use.
            user_prompt (str): The text prompt to send to the model.
            temperature (float): Sampling temperature (ignored by reasoning models).
            max_tokens (int): The maximum number of tokens to generate.

        Raises:
            ValueError: If the model name is unknown.

        Returns:
            Dict[str, Any]: {"output": [...], "usage": {...}}
        """
        if model_name in self.AZURE_OPENAI_MODELS or self._is_reasoning_model(model_name):
            return self._respond_openai(model_name, user_prompt, temperature, max_tokens)
        elif model_name in self.AZURE_AI_FOUNDATION_MODELS:
            return self._respond_foundation(model_name, user_prompt, temperature, max_tokens)
        else:
            available_models = self.AZURE_OPENAI_MODELS + self.AZURE_AI_FOUNDATION_MODELS
            raise ValueError(f"Unknown model: {model_name}. Available models: {available_models}")

    def _respond_openai(self, model_name, user_prompt, temperature=0, max_tokens=2048):
        self._initialize_openai_client()
        kwargs = {
            "model": model_name,
            "instructions": self.system_prompt,
            "input": user_prompt,
            "max_output_tokens": max_tokens,
        }
        # Reasoning models reject 'temperature'
        if not self._is_reasoning_model(model_name):
            kwargs["temperature"] = temperature

        response = self.openai_client.responses.create(**kwargs)
        usage = response.usage
        return {
            "output": [item.model_dump() for item in response.output],
            "usage": {
                "input_tokens": getattr(usage, "input_tokens", 0) if usage else 0,
                "output_tokens": getattr(usage, "output_tokens", 0) if usage else 0,
            }
        }

    def _respond_foundation(self, model_name, user_prompt, temperature=0, max_tokens=2048):
        self._initialize_foundation_client()
        messages = [SystemMessage(content=self.system_prompt), UserMessage(content=user_prompt)]
        response = self.foundation_client.complete(
            messages=messages, model=model_name, max_tokens=max_tokens, temperature=temperature
        )
        usage = response.usage
        return {
            "output": [
                {"type": "message",
                 "content": [{"type": "output_text", "text": choice.message.content or ""}]}
                for choice in response.choices
            ],
            "usage": {
                "input_tokens": getattr(usage, "prompt_tokens", 0) if usage else 0,
                "output_tokens": getattr(usage, "completion_tokens", 0) if usage else 0,
            }
        }
