from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SegmentArchetype:
    type: str
    intensity: str
    prompt: str
    music_style: str

    @property
    def detailed_description(self) -> str:
        return f"Prompt: {self.prompt}\nMusic Style: {self.music_style}"


CANONICAL_SLOT_SECONDS = 30

DEFAULT_ARCHETYPES: tuple[SegmentArchetype, ...] = (
    SegmentArchetype(
        "ambient",
        "low",
        "Opening video segment with introductory content, establishing shots, calm pacing, setting the scene for viewers, welcoming atmosphere.",
        "75 BPM, C major, ambient acoustic, soft piano and strings, gentle intro → warm build → sustained ambience → smooth transition, legato, piano to mezzo-piano dynamics.",
    ),
    SegmentArchetype(
        "emotional",
        "medium",
        "Main content section with dialogue or narration, medium energy, people interacting, conversational tone, engaging visual elements.",
        "85 BPM, G major, contemporary folk, acoustic guitar and light percussion, melodic intro → rhythmic development → emotional peak → gentle resolution, andante, mezzo-forte dynamics.",
    ),
    SegmentArchetype(
        "rhythmic",
        "medium",
        "Active segment with movement, transitions between scenes, moderate pacing, visual variety, maintaining viewer engagement and interest.",
        "95 BPM, F major, upbeat instrumental, guitar and drums, energetic intro → building momentum → dynamic climax → satisfying outro, moderato, forte dynamics.",
    ),
    SegmentArchetype(
        "ambient",
        "low",
        "Contemplative section with slower pacing, thoughtful moments, scenic views or quiet activities, peaceful atmosphere, reflective mood.",
        "65 BPM, A minor, neo-classical, solo piano and strings, introspective intro → emotional development → poignant peak → gentle fade, rubato, piano to mezzo-forte.",
    ),
    SegmentArchetype(
        "energetic",
        "high",
        "High-energy segment with excitement, celebrations, active scenes, lively interactions, positive emotions, engaging activities.",
        "110 BPM, D major, pop rock, electric guitar and full band, powerful intro → driving beat → triumphant climax → satisfying conclusion, allegro, fortissimo dynamics.",
    ),
    SegmentArchetype(
        "emotional",
        "medium",
        "Meaningful moments with personal connections, heartfelt conversations, important events, emotional significance, warm human interactions.",
        "80 BPM, E♭ major, cinematic orchestral, strings and piano, tender intro → building emotion → heartfelt climax → warm resolution, espressivo, dolce dynamics.",
    ),
    SegmentArchetype(
        "dramatic",
        "high",
        "Intense or significant moments, dramatic revelations, important decisions, tension building, climactic events, heightened emotions.",
        "100 BPM, B minor, dramatic orchestral, full orchestra with brass, suspenseful intro → tension building → dramatic peak → powerful resolution, allegro con fuoco, fortissimo.",
    ),
    SegmentArchetype(
        "ambient",
        "low",
        "Closing section with resolution, peaceful endings, final thoughts, wrap-up content, satisfying conclusion, calm departure feeling.",
        "70 BPM, C major, acoustic ambient, guitar and soft strings, reflective intro → gentle build → peaceful sustain → fade to silence, ritardando, diminuendo to pianissimo.",
    ),
)
