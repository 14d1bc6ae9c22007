# image_generator.py
"""Image acquisition chain.

A prompt is first enhanced with a style descriptor, optionally rewritten by the
chat model, and then handed to an ordered list of strategies. The first
strategy that yields a URL wins; the last one builds a deterministic Picsum URL
locally and cannot fail.
"""

import random
import re
from collections import namedtuple
from datetime import datetime

import requests
from flask import current_app
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

GENERATOR_MODEL = 'enhanced-real-image-generator'
DEFAULT_STYLE = 'realistic'

STYLE_ENHANCEMENTS = {
    'analog': 'warm colors, hand-drawn texture, natural feeling, vintage aesthetic, film grain, analog photography style',
    'metal': 'cold metallic surfaces, industrial design, sharp edges, chrome finish, modern technology, metallic textures, steel finish',
    'vintage': 'classic retro style, faded colors, aged paper texture, nostalgic mood, antique elements, vintage aesthetic, sepia tones',
    'realistic': 'photorealistic, high detail, natural lighting, professional photography, 8k resolution',
}

# Picsum id = seed % span + offset, plus a query filter
PLACEHOLDER_STYLES = {
    'analog': {'span': 500, 'offset': 200, 'filter': '?blur=1', 'category': 'nature'},
    'metal': {'span': 300, 'offset': 700, 'filter': '?grayscale', 'category': 'architecture'},
    'vintage': {'span': 400, 'offset': 100, 'filter': '?blur=2', 'category': 'objects'},
    'realistic': {'span': 600, 'offset': 400, 'filter': '', 'category': 'nature'},
}

PLACEHOLDER_URL = 'https://picsum.photos/id/{image_id}/512/512{filter}'
UNSPLASH_URL_PATTERN = re.compile(r'https://images\.unsplash\.com/[^\s]+', re.IGNORECASE)

OPTIMIZE_PROMPT_TEMPLATE = (
    'Create a detailed, artistic image generation prompt based on: "{prompt}". '
    'Make it vivid, specific, and suitable for AI image generation. Include artistic details, '
    'composition, lighting, and visual elements. Keep it under 100 words and focused on visual description.'
)

URL_GUESS_TEMPLATE = (
    'I need you to help me create a visual representation. Based on this prompt: "{prompt}", '
    'style: "{style}", please provide a detailed URL for a royalty-free image that matches this '
    'description. Use this format: https://images.unsplash.com/photo-[ID]?auto=format&fit=crop&w=512&q=80. '
    'Replace [ID] with a realistic photo ID that would match the prompt.'
)

# Errors that make a strategy fall through instead of failing the request
STRATEGY_ERRORS = (requests.exceptions.RequestException, KeyError, IndexError, ValueError, TypeError,
                   AttributeError)

GenerationResult = namedtuple('GenerationResult', ['image_url', 'prompt', 'metadata'])


def normalize_style(style):
    return style if style in STYLE_ENHANCEMENTS else DEFAULT_STYLE


def enhance_prompt_with_style(prompt, style):
    enhancement = STYLE_ENHANCEMENTS[normalize_style(style)]
    return f"{prompt}, {enhancement}, high quality, detailed, professional"


def prompt_seed(prompt):
    """31-multiplier 32-bit string hash over UTF-16 code units, as a non-negative int."""
    h = 0
    data = (prompt or '').encode('utf-16-le', 'surrogatepass')
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + code_unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def placeholder_url(prompt, style):
    """Deterministic Picsum URL for ``(prompt, style)``. Never touches the network."""
    cfg = PLACEHOLDER_STYLES[normalize_style(style)]
    image_id = prompt_seed(prompt) % cfg['span'] + cfg['offset']
    return PLACEHOLDER_URL.format(image_id=image_id, filter=cfg['filter'])


def extract_visual_keywords(prompt):
    words = [w for w in re.split(r'[,\s]+', prompt or '') if len(w) > 3]
    keywords = ' '.join(words[:3])
    return keywords[:37] + '...' if len(keywords) > 40 else keywords


def extract_unsplash_url(text):
    match = UNSPLASH_URL_PATTERN.search(text or '')
    if not match:
        return None
    return match.group(0).rstrip('.,)"\'')


def _create_requests_session():
    """Pooled session without transport-level retries; each call is tried once."""
    session = requests.Session()
    retry_strategy = Retry(total=0, backoff_factor=0, status_forcelist=[])
    adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=10, pool_maxsize=10)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


# --- STRATEGIES ---

class ImageStrategy:
    """One step of the chain. ``fetch`` returns a URL or None."""

    name = 'base'
    requires = ()

    def is_available(self, config):
        return all(config.get(key) for key in self.requires)

    def fetch(self, generator, prompt, style):
        raise NotImplementedError


class ImageEndpointStrategy(ImageStrategy):
    name = 'image_endpoint'
    requires = ('OPENROUTER_API_KEY',)

    def fetch(self, generator, prompt, style):
        cfg = current_app.config
        body = {
            'model': cfg['IMAGE_MODEL'],
            'prompt': prompt,
            'n': 1,
            'size': cfg['IMAGE_SIZE'],
            'response_format': 'url',
        }
        resp = generator.post_openrouter('/images/generations', body)
        return resp.json()['data'][0]['url'] or None


class StockSearchStrategy(ImageStrategy):
    name = 'stock_search'
    requires = ('UNSPLASH_ACCESS_KEY',)

    def fetch(self, generator, prompt, style):
        cfg = current_app.config
        keywords = extract_visual_keywords(prompt)
        current_app.logger.info(f"[IMAGE] Stock search keywords: {keywords!r}")
        resp = generator.session.get(
            cfg['UNSPLASH_SEARCH_URL'],
            params={'query': keywords, 'per_page': 10, 'orientation': 'squarish'},
            headers={'Authorization': f"Client-ID {cfg['UNSPLASH_ACCESS_KEY']}"},
            timeout=cfg['EXTERNAL_REQUEST_TIMEOUT'],
        )
        resp.raise_for_status()
        payload = resp.json()
        results = (payload.get('results') if isinstance(payload, dict) else None) or []
        if not results:
            return None
        picked = random.choice(results[:5])
        return picked['urls']['regular']


class ChatUrlGuessStrategy(ImageStrategy):
    name = 'chat_url_guess'
    requires = ('OPENROUTER_API_KEY',)

    def fetch(self, generator, prompt, style):
        content = generator.chat(
            current_app.config['URL_GUESS_MODEL'],
            URL_GUESS_TEMPLATE.format(prompt=prompt, style=style),
            max_tokens=150,
            temperature=0.3,
        )
        return extract_unsplash_url(content)


class PlaceholderStrategy(ImageStrategy):
    name = 'placeholder'

    def fetch(self, generator, prompt, style):
        return placeholder_url(prompt, style)


DEFAULT_STRATEGIES = (
    ImageEndpointStrategy(),
    StockSearchStrategy(),
    ChatUrlGuessStrategy(),
    PlaceholderStrategy(),
)


class ImageGenerator:
    def __init__(self, strategies=None, session=None):
        self.strategies = list(strategies or DEFAULT_STRATEGIES)
        self._session = session

    @property
    def session(self):
        if self._session is None:
            self._session = _create_requests_session()
        return self._session

    # --- OPENROUTER ---

    def _openrouter_headers(self):
        cfg = current_app.config
        return {
            'Authorization': f"Bearer {cfg['OPENROUTER_API_KEY']}",
            'Content-Type': 'application/json',
            'HTTP-Referer': cfg['OPENROUTER_REFERER'],
            'X-Title': cfg['OPENROUTER_TITLE'],
        }

    def post_openrouter(self, path, body):
        cfg = current_app.config
        url = f"{cfg['OPENROUTER_BASE_URL'].rstrip('/')}{path}"
        resp = self.session.post(url, headers=self._openrouter_headers(), json=body,
                                 timeout=cfg['EXTERNAL_REQUEST_TIMEOUT'])
        resp.raise_for_status()
        return resp

    def chat(self, model, content, max_tokens=150, temperature=0.7):
        body = {
            'model': model,
            'messages': [{'role': 'user', 'content': content}],
            'max_tokens': max_tokens,
            'temperature': temperature,
        }
        data = self.post_openrouter('/chat/completions', body).json()
        text = data['choices'][0]['message']['content']
        # some models answer with a list of content parts
        if not isinstance(text, str):
            return None
        return text.strip() or None

    def optimize_prompt(self, prompt):
        """Ask the chat model to embellish ``prompt``; None when unavailable."""
        cfg = current_app.config
        if not cfg.get('OPENROUTER_API_KEY'):
            current_app.logger.info("[IMAGE] OpenRouter key not configured, skipping prompt optimisation")
            return None
        try:
            return self.chat(cfg['PROMPT_MODEL'], OPTIMIZE_PROMPT_TEMPLATE.format(prompt=prompt))
        except STRATEGY_ERRORS as e:
            current_app.logger.warning(f"[IMAGE] Prompt optimisation failed: {e}")
            return None

    # --- CHAIN ---

    def acquire_image(self, prompt, style):
        """Run the strategies in order; return ``(url, strategy_name)``."""
        cfg = current_app.config
        for strategy in self.strategies:
            if not strategy.is_available(cfg):
                current_app.logger.debug(f"[IMAGE] Skipping {strategy.name}: not configured")
                continue
            try:
                url = strategy.fetch(self, prompt, style)
            except STRATEGY_ERRORS as e:
                current_app.logger.warning(f"[IMAGE] {strategy.name} failed: {e}")
                continue
            if url:
                current_app.logger.info(f"[IMAGE] {strategy.name} produced {url}")
                return url, strategy.name
            current_app.logger.info(f"[IMAGE] {strategy.name} returned nothing")

        # only reachable with a custom strategy list lacking the placeholder
        return placeholder_url(prompt, style), PlaceholderStrategy.name

    def generate_image(self, prompt, style=DEFAULT_STYLE):
        style = normalize_style(style)
        current_app.logger.info(f"[IMAGE] ========== IMAGE GENERATION START ========== style={style}")

        enhanced = enhance_prompt_with_style(prompt, style)
        optimized = self.optimize_prompt(enhanced)
        final_prompt = optimized or enhanced

        image_url, source = self.acquire_image(final_prompt, style)

        return GenerationResult(
            image_url=image_url,
            prompt=final_prompt,
            metadata={
                'model': GENERATOR_MODEL,
                'timestamp': datetime.utcnow().isoformat(),
                'style': style,
                'originalPrompt': prompt,
                'source': source,
                'promptOptimized': optimized is not None,
            },
        )


image_generator = ImageGenerator()
