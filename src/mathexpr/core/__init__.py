"""Core mathexpr: numeric backends, descriptors, config, context, tokenizer and evaluator."""
