"""Small built-in word list used to seed a fresh database."""

from __future__ import annotations

from typing import Iterator

DEMO_WORDS = (
    "able ache acid acre aged aide ally alone angle ankle apple arena argue "
    "arise aside audio awake award aware bacon badge baker basic beach beard "
    "begin being below bench berry birth black blade blame blank blaze bleak "
    "blend block blood bloom board boast brain brave bread break brick bride "
    "brief bring broad brook brown brush build cabin cable camel candy canoe "
    "cargo carry catch cause chain chair chalk charm chart chase cheap check "
    "cheek chess chest chief child chill choir civic claim clamp clash class "
    "clean clear clerk click cliff climb clock close cloth cloud coach coast "
    "coral couch count cover craft crane crash cream crisp crowd crown crumb "
    "curve cycle daily dance dealt delay depth diary digit dizzy dough draft "
    "drake drama dream dress drift drink drive eager eagle early earth eight "
    "elbow elder email empty enjoy equal error event exact exile extra fable "
    "faint faith false fancy feast fence fever field fiery final flame flash "
    "fleet flock flood floor flour fluid flute focus force forge frame fresh "
    "front frost fruit gauge ghost giant glass gleam globe glove grace grade "
    "grain grand grape grasp grass grave great green grief grill gross group "
    "guard guess guest guide habit happy harsh haven heart heavy hedge hello "
    "honey horse hotel house human humor ideal image index inner input irony "
    "ivory jelly jewel joint judge juice jumbo kayak knife knock label labor "
    "lance large laser later laugh layer learn lemon level light lilac limit "
    "linen liver local lodge logic loose lover lucky lunar lunch magic major "
    "maple march match mayor medal melon mercy merry metal meter minor model "
    "money month moral motor mount mouse mouth movie music naive nerve never "
    "night noble noise north novel nurse ocean offer olive onion opera orbit "
    "order organ other otter ounce outer owner oxide paint panel paper party "
    "pasta patch peace peach pearl pedal penny phase phone photo piano piece "
    "pilot pinch pitch pizza place plain plane plant plate plaza plumb point "
    "polar pound power press price pride prime print prize proof proud pulse "
    "punch pupil queen query quick quiet quilt quota quote radar radio raise "
    "ranch range rapid raven reach ready realm rebel relax reply rider ridge "
    "rifle right rigid rival river roast robin robot rocky rough round route "
    "royal rumor rural salad sauce scale scarf scene scent scope score scout "
    "sense serve seven shade shake shape share shark sharp sheep shelf shell "
    "shift shine shirt shock shore short shout sight skill skirt slate sleep "
    "slice slide slope small smart smile smoke snack snake solar solid solve "
    "sound south space spare spark speak spear speed spell spend spice spine "
    "spoon sport spray squad stack staff stage stair stake stamp stand stare "
    "start state steam steel stone storm story stove straw strip study style "
    "sugar suite sunny super swamp sweet swift sword table taste teach thank "
    "theme thick thief thing think thorn three throw thumb tiger title toast "
    "today token tooth topic torch total touch tower toxic trace track trade "
    "trail train trend trial tribe trick truck trust truth tulip tutor twist "
    "ulcer uncle under union unity upper urban usage usual valid value vapor "
    "vault verse video vigor vinyl viola virus visit vital vivid vocal voice "
    "wagon waste watch water whale wheat wheel where while white whole width "
    "woman world worry worth wound woven wrist yacht yield young youth zebra "
    "pale pole mule tale tile bale kale sale gale hale dale vale male "
    "a an as at be by do go he if in is it me my no of oh on or so to up us we"
).split()


def iter_demo_words() -> Iterator[str]:
    yield from DEMO_WORDS


__all__ = ["DEMO_WORDS", "iter_demo_words"]
