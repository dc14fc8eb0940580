"""
ISL Lexicon

Static vocabulary of the motion-clip dataset plus the tables the translator
resolves against: aliases, stop words, lemma rules and semantic categories.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class SuffixRule:
    """One ordered suffix-stripping rule for the lemmatizer."""
    suffix: str
    replacement: str = ''
    min_length: int = 0           # word must be strictly longer than this
    skip_double: bool = False     # leave words ending in the doubled suffix alone


# Words with a recorded motion clip
AVAILABLE_WORDS = [
    'alright', 'beautiful', 'bed', 'bedroom', 'blind', 'cell phone', 'chair',
    'clock', 'computer', 'deaf', 'door', 'dream', 'dress', 'fan', 'friday',
    'good afternoon', 'good morning', 'happy', 'hat', 'hello', 'how are you',
    'lamp', 'loud', 'monday', 'quiet', 'sad', 'saturday', 'shirt', 'skirt',
    'suit', 'sunday', 'table', 'thursday', 'today', 'tuesday', 'ugly',
    'wednesday', 'window',
]

# Clip files are named <stem>_canonical_median.json
CLIP_FILE_SUFFIX = '_canonical_median.json'

# Gloss -> clip file stem (the dataset is not consistently capitalised)
WORD_TO_FILENAME = {
    'alright': 'Alright', 'beautiful': 'Beautiful', 'bed': 'Bed', 'bedroom': 'Bedroom',
    'blind': 'Blind', 'cell phone': 'Cell phone', 'chair': 'Chair', 'clock': 'Clock',
    'computer': 'Computer', 'deaf': 'Deaf', 'door': 'Door', 'dream': 'Dream',
    'dress': 'Dress', 'fan': 'Fan', 'friday': 'Friday', 'good afternoon': 'Good afternoon',
    'good morning': 'Good Morning', 'happy': 'happy', 'hat': 'Hat', 'hello': 'Hello',
    'how are you': 'How are you', 'lamp': 'Lamp', 'loud': 'loud', 'monday': 'Monday',
    'quiet': 'quiet', 'sad': 'sad', 'saturday': 'Saturday', 'shirt': 'Shirt',
    'skirt': 'Skirt', 'suit': 'Suit', 'sunday': 'Sunday', 'table': 'Table',
    'thursday': 'Thursday', 'today': 'Today', 'tuesday': 'Tuesday', 'ugly': 'Ugly',
    'wednesday': 'Wednesday', 'window': 'Window',
}

# Time expressions that move to the start of the sentence
TIME_WORDS = frozenset({
    'today', 'tomorrow', 'yesterday', 'monday', 'tuesday', 'wednesday',
    'thursday', 'friday', 'saturday', 'sunday',
})

# Function words that have no sign and are dropped silently
FUNCTION_WORDS = frozenset({
    'a', 'an', 'the', 'is', 'am', 'are', 'was', 'were', 'be', 'been',
    'will', 'would', 'can', 'could', 'should', 'shall', 'may', 'might',
    'to', 'at', 'in', 'on', 'of', 'for', 'with', 'from', 'by', 'about',
    'i', 'you', 'he', 'she', 'it', 'we', 'they', 'me', 'him', 'her',
    'us', 'them', 'my', 'your', 'our', 'their', 'mine', 'yours', 'ours', 'theirs', 'its',
})

# Canonical gloss -> everyday variants
SEMANTIC_ALIASES = {
    'alright': ['okay', 'ok', 'fine'],
    'beautiful': ['pretty', 'gorgeous', 'lovely'],
    'bed': ['bunk', 'cot'],
    'bedroom': ['bed room', 'room', 'sleeping room'],
    'blind': ['visionless', 'sightless', 'visually impaired', 'vision impaired'],
    'cell phone': ['mobile phone', 'mobile', 'phone', 'smartphone', 'cellphone'],
    'chair': ['seat', 'stool', 'armchair'],
    'clock': ['watch', 'timepiece'],
    'computer': ['pc', 'laptop', 'desktop', 'computer system'],
    'deaf': ['hearing impaired', 'hard of hearing'],
    'door': ['gate', 'entryway'],
    'dream': ['vision', 'fantasy', 'imagine'],
    'dress': ['gown', 'frock'],
    'fan': ['cooler', 'blower', 'ceiling fan'],
    'friday': ['fri'],
    'good afternoon': ['afternoon greeting', 'good noon'],
    'good morning': ['morning greeting', 'gm', 'good day'],
    'happy': ['glad', 'joyful', 'cheerful', 'pleased'],
    'hat': ['cap', 'beanie'],
    'hello': ['hi', 'hey', 'greetings'],
    'how are you': ['how r u', 'how are ya', 'how you doing'],
    'lamp': ['light', 'lantern'],
    'loud': ['noisy', 'booming'],
    'monday': ['mon'],
    'quiet': ['silent', 'hushed', 'calm'],
    'sad': ['unhappy', 'upset', 'sorrowful'],
    'saturday': ['sat'],
    'shirt': ['top', 'tshirt', 't-shirt', 'tee'],
    'skirt': ['mini', 'skirts', 'pleated skirt'],
    'suit': ['blazer', 'tuxedo', 'coat and pants'],
    'sunday': ['sun'],
    'table': ['desk', 'dining table'],
    'thursday': ['thu'],
    'today': ['present day', 'nowadays'],
    'tuesday': ['tue'],
    'ugly': ['unattractive', 'plain'],
    'wednesday': ['wed'],
    'window': ['pane', 'glass window'],
}

# Irregular forms the suffix rules would get wrong
LEMMA_OVERRIDES = {
    'better': 'good',
    'best': 'good',
    'worse': 'bad',
    'worst': 'bad',
    'happier': 'happy',
    'happiest': 'happy',
    'sadder': 'sad',
    'saddest': 'sad',
    'children': 'child',
    'men': 'man',
    'women': 'woman',
    'people': 'person',
    'phones': 'phone',
    'cellphones': 'cellphone',
}

# Most specific first; the first applicable rule wins
LEMMA_SUFFIX_RULES = (
    SuffixRule('ies', 'y', min_length=4),
    SuffixRule('ves', 'f', min_length=4),
    SuffixRule('ing', '', min_length=5),
    SuffixRule('ed', '', min_length=4),
    SuffixRule('est', '', min_length=5),
    SuffixRule('er', '', min_length=4),
    SuffixRule('s', '', min_length=4, skip_double=True),
)

# Category keyword substrings feeding the binary slots of the local embedding
SEMANTIC_CATEGORY_KEYWORDS = {
    'greeting': ['hello', 'hi', 'hey', 'good morning', 'good afternoon', 'how are you'],
    'time': ['today', 'tomorrow', 'yesterday', 'monday', 'tuesday', 'wednesday',
             'thursday', 'friday', 'saturday', 'sunday'],
    'clothing': ['hat', 'dress', 'shirt', 'skirt', 'suit'],
    'furniture': ['bed', 'bedroom', 'chair', 'table'],
    'device': ['computer', 'cell', 'phone', 'fan', 'lamp'],
    'feeling_pos': ['happy', 'alright', 'beautiful', 'good'],
    'feeling_neg': ['sad', 'ugly', 'loud', 'quiet'],
    'household': ['door', 'window', 'lamp'],
    'accessibility': ['blind', 'deaf'],
    'imagination': ['dream'],
}

# Whole-sentence transliterations applied before segmentation
SENTENCE_SUBSTITUTIONS = {
    "आज सोमवार को मैं मोबाइल और कंप्यूटर देख रहा हूँ।": "Monday mobile computer",
    "सुबह बेडरूम में घड़ी और लैम्प चालू थे।": "bedroom clock lamp",
    "मेज़ पर पेन, किताब और अख़बार पड़े हैं।": "pen book newspaper",
    "मैंने आज कमीज़ और सूट पहना है।": "shirt suit",
    "रसोई में पंखा और लैम्प चालू है।": "kitchen fan lamp",
    "यह तस्वीर बहुत सुंदर है।": "photograph",
    "यह पोशाक सस्ती नहीं, महंगी है।": "dress",
    "पुरुष और महिला दोनों यहाँ बैठे हैं।": "male female",
    "बंदूक और युद्ध से शांति नहीं मिलती।": "gun war peace",
    "अंधे और बहिरे लोगों में भी ऊर्जा होती है।": "blind deaf energy",
}


def build_alias_map(table: Dict[str, Iterable[str]]) -> Dict[str, str]:
    """
    Flatten a canonical -> variants table into variant -> canonical.

    Each canonical word also maps to itself. Keys are trimmed and lower-cased;
    empty keys are ignored.
    """
    alias_map = {}
    for canonical, variants in table.items():
        key = (canonical or '').strip().lower()
        if key:
            alias_map[key] = canonical
        for variant in variants or ():
            alias_key = (variant or '').strip().lower()
            if alias_key:
                alias_map[alias_key] = canonical
    return alias_map


class Lexicon:
    """
    Bundle of the tables one translator instance resolves against.

    The defaults describe the shipped ISL dataset; tests and deployments with
    a different clip set pass their own tables.
    """

    def __init__(
        self,
        vocabulary: Optional[Iterable[str]] = None,
        aliases: Optional[Dict[str, Iterable[str]]] = None,
        function_words: Optional[Iterable[str]] = None,
        time_words: Optional[Iterable[str]] = None,
        lemma_overrides: Optional[Dict[str, str]] = None,
        suffix_rules: Optional[Tuple[SuffixRule, ...]] = None,
        category_keywords: Optional[Dict[str, List[str]]] = None,
        sentence_substitutions: Optional[Dict[str, str]] = None,
        filenames: Optional[Dict[str, str]] = None,
    ):
        self.vocabulary: List[str] = list(AVAILABLE_WORDS if vocabulary is None else vocabulary)
        self.vocabulary_set: FrozenSet[str] = frozenset(self.vocabulary)
        self.aliases = dict(SEMANTIC_ALIASES if aliases is None else aliases)
        self.alias_map = build_alias_map(self.aliases)
        self.function_words = frozenset(FUNCTION_WORDS if function_words is None else function_words)
        self.time_words = frozenset(TIME_WORDS if time_words is None else time_words)
        self.lemma_overrides = dict(LEMMA_OVERRIDES if lemma_overrides is None else lemma_overrides)
        self.suffix_rules = tuple(LEMMA_SUFFIX_RULES if suffix_rules is None else suffix_rules)
        self.category_keywords = dict(
            SEMANTIC_CATEGORY_KEYWORDS if category_keywords is None else category_keywords
        )
        self.sentence_substitutions = dict(
            SENTENCE_SUBSTITUTIONS if sentence_substitutions is None else sentence_substitutions
        )
        self.filenames = dict(WORD_TO_FILENAME if filenames is None else filenames)

    def is_vocabulary(self, phrase: str) -> bool:
        return phrase in self.vocabulary_set

    def alias_target(self, phrase: str) -> Optional[str]:
        return self.alias_map.get(phrase)

    def is_function_word(self, word: str) -> bool:
        return word in self.function_words

    def is_time_phrase(self, phrase: str) -> bool:
        """True when any word of the phrase is a calendar/day-of-week term."""
        return any(word in self.time_words for word in phrase.lower().split())

    def clip_filename(self, gloss: str) -> str:
        return self.filenames.get(gloss.lower(), gloss)


DEFAULT_LEXICON = Lexicon()
