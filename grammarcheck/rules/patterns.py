"""
Rule Tables
===========
Pattern tables for the offline rule engines: common usage errors, common
misspellings, homophones, idioms and subject-verb agreement.
"""

from typing import Dict, List, Tuple

# Words with consonant sound despite vowel start (use 'a')
CONSONANT_SOUND_WORDS = {
    'ubiquitous', 'unanimous', 'unicorn', 'uniform', 'union', 'unique',
    'unit', 'united', 'universal', 'university', 'usage', 'use', 'used',
    'useful', 'user', 'usual', 'usually', 'usurp', 'utility', 'utensil',
    'utopia', 'utopian', 'european', 'euphemism', 'euphoria', 'eureka',
    'one', 'once', 'uranium', 'ewe',
}

# Words with vowel sound despite consonant start (use 'an')
VOWEL_SOUND_WORDS = {'heir', 'heiress', 'honest', 'honestly', 'honor', 'honour',
                     'honorable', 'hour', 'hourly'}

# Words that can legitimately be repeated
ALLOWED_REPEATS = {'that', 'had', 'very', 'really', 'bye', 'ha', 'no'}

# Misspellings that are never real words
COMMON_MISSPELLINGS: Dict[str, str] = {
    'teh': 'the',
    'hte': 'the',
    'adn': 'and',
    'taht': 'that',
    'thier': 'their',
    'wich': 'which',
    'accomodate': 'accommodate',
    'acheive': 'achieve',
    'accross': 'across',
    'agressive': 'aggressive',
    'apparant': 'apparent',
    'appearence': 'appearance',
    'arguement': 'argument',
    'begining': 'beginning',
    'beleive': 'believe',
    'calender': 'calendar',
    'catagory': 'category',
    'cemetary': 'cemetery',
    'collegue': 'colleague',
    'comming': 'coming',
    'commitee': 'committee',
    'completly': 'completely',
    'concious': 'conscious',
    'definately': 'definitely',
    'diffrent': 'different',
    'dissapear': 'disappear',
    'dissapoint': 'disappoint',
    'embarass': 'embarrass',
    'enviroment': 'environment',
    'existance': 'existence',
    'experiance': 'experience',
    'foriegn': 'foreign',
    'goverment': 'government',
    'grammer': 'grammar',
    'guage': 'gauge',
    'harrass': 'harass',
    'heighth': 'height',
    'heirarchy': 'hierarchy',
    'immediatly': 'immediately',
    'independant': 'independent',
    'indispensible': 'indispensable',
    'intellegent': 'intelligent',
    'knowlege': 'knowledge',
    'liason': 'liaison',
    'libary': 'library',
    'lisence': 'license',
    'maintenence': 'maintenance',
    'millenium': 'millennium',
    'miniscule': 'minuscule',
    'mispell': 'misspell',
    'neccessary': 'necessary',
    'noticable': 'noticeable',
    'occassion': 'occasion',
    'occured': 'occurred',
    'occurence': 'occurrence',
    'paralell': 'parallel',
    'particulary': 'particularly',
    'persistant': 'persistent',
    'personell': 'personnel',
    'posession': 'possession',
    'preceed': 'precede',
    'privelege': 'privilege',
    'publically': 'publicly',
    'realy': 'really',
    'recieve': 'receive',
    'reccomend': 'recommend',
    'refered': 'referred',
    'relevent': 'relevant',
    'religous': 'religious',
    'repitition': 'repetition',
    'rythm': 'rhythm',
    'seperate': 'separate',
    'sieze': 'seize',
    'similer': 'similar',
    'speach': 'speech',
    'succesful': 'successful',
    'supercede': 'supersede',
    'suprise': 'surprise',
    'temperture': 'temperature',
    'threshhold': 'threshold',
    'tommorow': 'tomorrow',
    'tounge': 'tongue',
    'truely': 'truly',
    'unfortunatly': 'unfortunately',
    'untill': 'until',
    'usefull': 'useful',
    'vaccuum': 'vacuum',
    'vehical': 'vehicle',
    'visable': 'visible',
    'wierd': 'weird',
    'writting': 'writing',
}

# (pattern, message, replacement template, rule id, confidence)
# Replacement templates may reference regex groups as {0}, {1}, ...
USAGE_RULES: List[Tuple[str, str, str, str, float]] = [
    (r'\b(could|would|should|must|might)\s+of\b',
     'Incorrect: "{0} of"', '{0} have', 'GR050', 0.95),
    (r'\b(alot)\b', '"Alot" is not a word', 'a lot', 'GR062', 0.95),
    (r'\b(irregardless)\b', '"Irregardless" is non-standard', 'regardless', 'GR060', 0.9),
    (r'\b(supposably)\b', '"Supposably" is often incorrect', 'supposedly', 'GR061', 0.8),
]

# Comparison homophones: (pattern, message, replacement template, rule id, confidence)
HOMOPHONE_RULES: List[Tuple[str, str, str, str, float]] = [
    (r"\b(more|less|better|worse|greater|larger|smaller|higher|lower|faster|slower|rather|other)\s+(then)\b",
     'Comparison requires "than" not "then"', '{0} than', 'GR076', 0.9),
    (r"\b(their)\s+(is|are|was|were)\b",
     'Possible error: "their" should be "there"', 'there {1}', 'GR070', 0.75),
    (r"\b(your)\s+(going|coming|doing|being|getting|making|taking)\b",
     'Possible error: "your" should be "you\'re"', "you're {1}", 'GR072', 0.8),
    (r"\b(its)\s+(a|an|the|going|been|not)\b",
     'Possible error: "its" should be "it\'s"', "it's {1}", 'GR074', 0.7),
    (r"\b(to|will|might|could|may|can|would|should)\s+(loose)\b",
     'Verb form is "lose" not "loose"', '{0} lose', 'GR079', 0.85),
]

# Misused idioms: phrase -> correct form
IDIOMS: Dict[str, str] = {
    'for all intensive purposes': 'for all intents and purposes',
    'one in the same': 'one and the same',
    'nip it in the butt': 'nip it in the bud',
    'case and point': 'case in point',
    'escape goat': 'scapegoat',
    'should of known': "should've known",
    'i could care less': "I couldn't care less",
    'on accident': 'by accident',
    'mute point': 'moot point',
    'deep seeded': 'deep-seated',
    'tow the line': 'toe the line',
    'baited breath': 'bated breath',
    'free reign': 'free rein',
    'peak my interest': 'pique my interest',
    'hone in on': 'home in on',
}

# Subject-verb agreement for pronouns: pronoun -> {wrong verb: correct verb}
PRONOUN_AGREEMENT: Dict[str, Dict[str, str]] = {
    'i': {'has': 'have', 'is': 'am', 'are': 'am', 'does': 'do', 'doesn\'t': 'don\'t'},
    'you': {'has': 'have', 'is': 'are', 'was': 'were', 'does': 'do', 'doesn\'t': 'don\'t', 'am': 'are'},
    'we': {'has': 'have', 'is': 'are', 'was': 'were', 'does': 'do', 'doesn\'t': 'don\'t', 'am': 'are'},
    'they': {'has': 'have', 'is': 'are', 'was': 'were', 'does': 'do', 'doesn\'t': 'don\'t', 'am': 'are'},
    'he': {'have': 'has', 'are': 'is', 'were': 'was', 'do': 'does', 'don\'t': 'doesn\'t', 'am': 'is'},
    'she': {'have': 'has', 'are': 'is', 'were': 'was', 'do': 'does', 'don\'t': 'doesn\'t', 'am': 'is'},
    'it': {'have': 'has', 'are': 'is', 'were': 'was', 'do': 'does', 'don\'t': 'doesn\'t', 'am': 'is'},
}

# Words before a pronoun that make a bare verb form correct ("does he have")
AUXILIARY_PRECEDERS = {
    'do', 'does', 'did', 'will', 'would', 'can', 'could', 'shall', 'should',
    'may', 'might', 'must', 'to', 'let', 'make', 'made', 'help', 'if', 'that',
    'as', 'where', 'what', 'how', 'when', 'why', 'whether',
}

SINGULAR_QUANTIFIER_FIXES = {'are': 'is', 'were': 'was', 'have': 'has'}
PLURAL_QUANTIFIER_FIXES = {'is': 'are', 'was': 'were', 'has': 'have'}
