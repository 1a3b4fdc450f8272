"""Pure helpers: record normalization, match scoring and the OpenAI client."""
