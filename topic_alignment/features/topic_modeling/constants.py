"""
Topic Modeling Constants and Configuration

This module defines constants for fitting LDA on the standards corpus
and folding test items into the fitted model.
"""

# ===========================
# Module Version
# ===========================
TOPIC_MODELING_MODULE_VERSION = "0.1.0"

# ===========================
# Default LDA Parameters
# ===========================
DEFAULT_NUM_TOPICS = 7
"""Default number of topics (one per content area the analysts expected)"""

DEFAULT_PASSES = 50
"""Number of training passes; the standards corpus has only a handful of documents"""

DEFAULT_ITERATIONS = 400
"""Maximum E-step iterations per document during training"""

DEFAULT_RANDOM_STATE = 1234
"""Random seed for reproducibility"""

DEFAULT_ALPHA = "symmetric"
"""Document-topic prior; symmetric so an item without evidence folds in to uniform"""

DEFAULT_ETA = None
"""Topic-word prior (None = symmetric 1/K, gensim default)"""

# ===========================
# Fold-in Inference
# ===========================
DEFAULT_INFERENCE_MAX_ITERATIONS = 1000
"""Cap on variational E-step iterations per folded-in document"""

DEFAULT_INFERENCE_TOLERANCE = 1e-6
"""Stop when the mean absolute change of gamma falls below this"""

SIMPLEX_TOLERANCE = 1e-6
"""Allowed deviation of a posterior row sum from 1.0"""

# ===========================
# Evaluation
# ===========================
DEFAULT_NUM_TOP_WORDS = 10
"""Top words reported per topic"""

DEFAULT_COHERENCE_METRIC = "u_mass"
"""Coherence metric; u_mass works from the bag-of-words corpus alone"""

TEXT_BASED_COHERENCE_METRICS = ("c_v", "c_uci", "c_npmi")
"""Coherence metrics that need the tokenized texts, not just the corpus"""

# ===========================
# Posterior Tables
# ===========================
TOPIC_LABEL_PREFIX = "Topic"
"""Fallback label prefix for topics without an analyst label (Topic 1, Topic 2, ...)"""

POSTERIOR_COLUMNS = ["item", "topic", "label", "probability", "Level", "overlap_terms"]
"""Column order of the exported long posterior table"""
