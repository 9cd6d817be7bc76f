import re
import time
import logging
from concurrent.futures import ThreadPoolExecutor

import requests
from deep_translator import GoogleTranslator

from .errors import TranslationFailure, TranslationServiceError

logger = logging.getLogger(__name__)

AZURE_ENDPOINT = 'https://api.cognitive.microsofttranslator.com/translate'
AZURE_API_VERSION = '3.0'

# Regex for placeholders like {name} or <tag>...</tag>
PLACEHOLDER_REGEX = re.compile(r'(\{[^}]+\}|<[^>]+>[^<]*</[^>]+>|<[^>]+/>)')

# Locale mapping for deep-translator
LANG_MAP = {
    'zh': lambda locale: 'zh-TW' if 'TW' in locale else 'zh-CN',
    'nb': lambda _: 'no',
    'he': lambda _: 'iw',
}


class TextProtector:
    """Hides placeholders and whitelisted terms from the translation service."""

    @staticmethod
    def protect(text, whitelist=(), placeholders=True):
        markers = {}

        def replacer(prefix):
            def _replace(match):
                marker = f"{prefix}{len(markers)}X"
                markers[marker] = match.group(0)
                return marker
            return _replace

        protected = PLACEHOLDER_REGEX.sub(replacer("PH"), text) if placeholders else text

        # Longest terms first so "Virgin Atlantic" wins over "Virgin"
        for term in sorted(filter(None, whitelist), key=len, reverse=True):
            pattern = re.compile(r'\b' + re.escape(term) + r'\b', re.IGNORECASE)
            protected = pattern.sub(replacer("WL"), protected)

        return protected, markers

    @staticmethod
    def restore(text, markers):
        if not text or not markers:
            return text

        # Translators sometimes change marker case
        for marker, original in sorted(markers.items(), key=lambda m: len(m[0]), reverse=True):
            pattern = re.compile(re.escape(marker), re.IGNORECASE)
            text = pattern.sub(lambda _: original, text)
        return text


class ProtectedTranslator:
    """
    Base for providers. Text goes to the service untouched unless placeholder
    protection is switched on or a whitelist is given.
    """

    def __init__(self, whitelist=None, protect_placeholders=False):
        self.whitelist = list(whitelist or [])
        self.protect_placeholders = protect_placeholders

    def translate(self, text, language):
        protected, markers = TextProtector.protect(text, self.whitelist, self.protect_placeholders)
        translated = self._translate(protected, language)
        return TextProtector.restore(translated, markers)

    def _translate(self, text, language):
        raise NotImplementedError


class AzureTranslator(ProtectedTranslator):
    def __init__(self, api_key, region, timeout=30, whitelist=None, protect_placeholders=False,
                 endpoint=AZURE_ENDPOINT):
        super().__init__(whitelist, protect_placeholders)
        self.api_key = api_key
        self.region = region
        self.timeout = timeout
        self.endpoint = endpoint

    def _translate(self, text, language):
        params = {'api-version': AZURE_API_VERSION, 'to': language}
        headers = {
            'Content-Type': 'application/json',
            'Ocp-Apim-Subscription-Key': self.api_key,
            'Ocp-Apim-Subscription-Region': self.region,
        }
        try:
            response = requests.post(
                self.endpoint,
                params=params,
                headers=headers,
                json=[{'text': text}],
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TranslationServiceError(f"Azure request failed: {e}") from e

        try:
            translated = response.json()[0]['translations'][0]['text']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TranslationServiceError(f"Unexpected Azure response: {response.text[:200]}") from e
        if not isinstance(translated, str):
            raise TranslationServiceError(f"Unexpected Azure response: {response.text[:200]}")
        return translated


class GoogleProvider(ProtectedTranslator):
    def _translate(self, text, language):
        # GoogleTranslator keeps the query on the instance, so array workers
        # must not share one.
        try:
            translator = GoogleTranslator(source='auto', target=get_translator_code(language))
            translated = translator.translate(text)
        except Exception as e:
            raise TranslationServiceError(f"Google translation failed: {e}") from e
        if not isinstance(translated, str):
            raise TranslationServiceError("Google translation returned no text")
        return translated


def get_translator_code(locale):
    lang_code = locale.split('-')[0]
    if lang_code in LANG_MAP:
        return LANG_MAP[lang_code](locale)
    return lang_code


def build_translator(config):
    if config.provider == 'google':
        return GoogleProvider(whitelist=config.whitelist, protect_placeholders=config.protect_placeholders)
    return AzureTranslator(
        config.azure_api_key,
        config.azure_api_region,
        timeout=config.timeout,
        whitelist=config.whitelist,
        protect_placeholders=config.protect_placeholders,
    )


class LeafTranslator:
    """Translates one string, retrying with exponential backoff."""

    def __init__(self, capability, retry_count=3, retry_delay=1.0):
        self.capability = capability
        self.retry_count = retry_count
        self.retry_delay = retry_delay

    def translate_leaf(self, text, language):
        if not text.strip():
            return text

        delay = self.retry_delay
        last_error = None
        for attempt in range(1, self.retry_count + 1):
            logger.info('Translating "%s" to %s (attempt %d of %d)', text, language, attempt, self.retry_count)
            try:
                return self.capability.translate(text, language)
            except Exception as e:
                last_error = e
                logger.error(
                    'Error translating "%s" (attempt %d of %d): %s',
                    text, attempt, self.retry_count, e,
                )

            if attempt < self.retry_count:
                logger.info("Retrying in %dms...", int(delay * 1000))
                time.sleep(delay)
                delay *= 2

        raise TranslationFailure(text, language, self.retry_count) from last_error


class TreeTranslator:
    def __init__(self, leaf_translator):
        self.leaf_translator = leaf_translator

    def translate_tree(self, missing, language, path=()):
        """
        Rebuilds missing with every string translated. Mapping keys go one
        after another; the strings of one array are translated concurrently.
        Numbers, booleans and nulls pass through.
        """
        if isinstance(missing, str):
            return self.leaf_translator.translate_leaf(missing, language)
        if isinstance(missing, list):
            return self._translate_array(missing, language)
        if isinstance(missing, dict):
            translated = {}
            for key, value in missing.items():
                key_path = path + (key,)
                if not isinstance(value, dict):
                    logger.info("Translating key: %s", '.'.join(key_path))
                translated[key] = self.translate_tree(value, language, key_path)
            return translated
        return missing

    def _translate_array(self, items, language):
        result = list(items)
        indexes = [i for i, item in enumerate(items) if isinstance(item, str)]
        if not indexes:
            return result

        with ThreadPoolExecutor(max_workers=len(indexes)) as executor:
            futures = [
                (i, executor.submit(self.leaf_translator.translate_leaf, items[i], language))
                for i in indexes
            ]
            for i, future in futures:
                result[i] = future.result()
        return result
