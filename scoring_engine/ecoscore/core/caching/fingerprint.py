"""Cache key derivation."""

import json

from ecoscore.core.models import FeatureVector


def cache_key(features: FeatureVector) -> str:
    """Fingerprint built from title, product type and price only.

    Products that share these three fields share a cache entry even when
    their descriptions, materials or certifications differ.
    """
    return json.dumps(
        {
            "title": features.title,
            "type": features.product_type.value,
            "price": features.price,
        },
        sort_keys=True,
    )
