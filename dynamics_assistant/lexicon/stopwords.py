"""Portuguese articles, prepositions and conjunctions dropped before scanning."""

STOP_WORDS: frozenset[str] = frozenset({
    "o", "a", "os", "as", "um", "uma", "uns", "umas",
    "de", "do", "da", "dos", "das", "no", "na", "nos", "nas",
    "ao", "aos", "pelo", "pela", "pelos", "pelas",
    "com", "para", "por", "em", "sobre", "sob", "entre",
    "que", "quem", "qual", "quais", "quando", "onde", "como",
    "e", "ou", "mas", "porem", "todavia", "entretanto", "contudo",
})
