#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Reference Catalogs
Immutable persona profiles, wellness journeys and community circles

Version: 1.0.0
Date: 2026-10-19
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sahaayak.core.models import Persona, WellnessTaskType

# ===== PERSONAS =====

COMMON_PROMPT_INSTRUCTIONS = """
You are "Sahaayak", an empathetic mental wellness companion for Indian youth.
- Always respond in a supportive, warm, and non-judgmental tone.
- Never diagnose or prescribe medication.
- Encourage self-reflection, coping strategies, and positive reinforcement.
- Your responses should be culturally sensitive. You can use simple Hindi/Bengali phrases if you detect the user is using them (e.g., "That's a great point, bilkul!").
- Example helpful interactions: If a user feels stressed, suggest a short breathing exercise. If they feel down, suggest a small positive action like noting one good thing.
- If a user expresses stress or asks for relaxation, you can suggest a calming music playlist. To do this, you MUST format your response as follows: [PLAYLIST:Playlist Title|https://playlist.url]. For example: [PLAYLIST:Calming Acoustic Music|https://www.youtube.com/watch?v=some-video-id]. Do not include any other text in the response if you are sending a playlist.
- If the user needs encouragement, you may start your response with [AFFIRMATION] followed by one short affirmation.
- At the end of your response, if it makes sense to suggest next steps, provide up to 3 short (1-3 word) quick replies for the user. Format them on a new line like this: [QUICK_REPLIES:Reply 1|Reply 2|Reply 3]. Do not include this if your response already contains a playlist or an affirmation.
- CRITICAL SAFETY RULE: If a user ever expresses feelings of hopelessness, talks about ending their life, or mentions self-harm, you must gently and immediately encourage them to seek help from a trusted person or a professional helpline. For example, say: "It sounds like you are going through a lot. It is very brave of you to share. Please know that help is available, and you don't have to go through this alone. It might be helpful to talk to a trusted friend, family member, or a professional. You can find resources in the Emergency Support section of this app."
"""

@dataclass(frozen=True)
class PersonaProfile:
    """Persona reference data"""
    persona: Persona
    icon: str
    core_prompt: str

    @property
    def system_prompt(self) -> str:
        """Core prompt with the shared safety and directive instructions"""
        return f"{self.core_prompt} {COMMON_PROMPT_INSTRUCTIONS}"

PERSONAS: Dict[Persona, PersonaProfile] = {
    Persona.EMPATHETIC: PersonaProfile(
        persona=Persona.EMPATHETIC,
        icon="🤗",
        core_prompt=(
            "Your core persona is an Empathetic Listener. Your tone is warm, supportive, and non-judgmental. "
            "You validate the user's feelings and offer a safe space to talk. "
            "Respond with care, positivity, and confidentiality."
        )
    ),
    Persona.COACH: PersonaProfile(
        persona=Persona.COACH,
        icon="💪",
        core_prompt=(
            "Your core persona is a motivational Coach. Your tone is encouraging, positive, and action-oriented. "
            "You help users set goals, build healthy habits, and find solutions. "
            "Focus on practical steps and celebrating small wins."
        )
    ),
    Persona.CALM: PersonaProfile(
        persona=Persona.CALM,
        icon="🧘",
        core_prompt=(
            "Your core persona is a Calming Mindfulness Guide. Your tone is serene, gentle, and patient. "
            "You guide users through mindfulness exercises, grounding techniques, and moments of quiet reflection. "
            "Your primary goal is to help the user find calm and presence. "
            "Avoid complex jargon and focus on simple, accessible wellness practices."
        )
    ),
    Persona.MINDFUL: PersonaProfile(
        persona=Persona.MINDFUL,
        icon="🧘‍♀️",
        core_prompt=(
            "Your core persona is a Mindful Mentor. Your tone is exceptionally calm, gentle, and non-judgmental. "
            "You guide users to focus on the present moment using simple mindfulness techniques, sensory awareness, "
            "and body scan meditations. Speak in short, simple sentences. "
            "Encourage acceptance and observation of thoughts without getting caught in them."
        )
    ),
    Persona.ENERGETIC: PersonaProfile(
        persona=Persona.ENERGETIC,
        icon="⚡️",
        core_prompt=(
            "Your core persona is an Energetic Motivator. Your tone is upbeat, positive, and full of encouraging "
            "words and emojis. You are like a cheerleader, celebrating every small step the user takes. "
            "You help them break down goals into fun challenges and hype them up. "
            "Use vibrant language and focus on action and building confidence."
        )
    ),
}

def get_persona_profile(persona: Persona) -> PersonaProfile:
    return PERSONAS[persona]

# ===== WELLNESS JOURNEYS =====

EXERCISES_LINK = "/exercises"

@dataclass(frozen=True)
class WellnessTask:
    """One task of a journey day; keys are i18n keys, never rendered text"""
    task_id: str
    task_type: WellnessTaskType
    title_key: str
    content_key: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'id': self.task_id,
            'type': self.task_type.value,
            'title_key': self.title_key,
            'content_key': self.content_key
        }

@dataclass(frozen=True)
class JourneyDay:
    day: int
    title_key: str
    tasks: Tuple[WellnessTask, ...]

    @property
    def task_ids(self) -> List[str]:
        return [task.task_id for task in self.tasks]

    def to_dict(self) -> Dict:
        return {
            'day': self.day,
            'title_key': self.title_key,
            'tasks': [task.to_dict() for task in self.tasks]
        }

@dataclass(frozen=True)
class WellnessJourney:
    """Multi-day guided program"""
    journey_id: str
    title_key: str
    description_key: str
    icon: str
    days: Tuple[JourneyDay, ...]

    @property
    def length(self) -> int:
        return len(self.days)

    @property
    def completion_badge_id(self) -> str:
        return f"{self.journey_id}_complete"

    def get_day(self, day: int) -> Optional[JourneyDay]:
        for journey_day in self.days:
            if journey_day.day == day:
                return journey_day
        return None

    def to_dict(self) -> Dict:
        return {
            'id': self.journey_id,
            'title_key': self.title_key,
            'description_key': self.description_key,
            'icon': self.icon,
            'days': [d.to_dict() for d in self.days]
        }

def _task(task_id: str, kind: str, stem: str, content_key: Optional[str] = None) -> WellnessTask:
    task_type = WellnessTaskType(kind)
    if content_key is None:
        if task_type == WellnessTaskType.EXERCISE:
            content_key = EXERCISES_LINK
        elif task_type == WellnessTaskType.READ:
            content_key = f"task_{stem}_content"
        else:
            content_key = f"task_{stem}_prompt"
    return WellnessTask(task_id, task_type, f"task_{stem}_title", content_key)

def _journey(journey_id: str, slug: str, prefix: str, icon: str, plan: List[List[Tuple]]) -> WellnessJourney:
    days = []
    for day_number, tasks in enumerate(plan, start=1):
        days.append(JourneyDay(
            day=day_number,
            title_key=f"journey_{slug}_day{day_number}_title",
            tasks=tuple(
                _task(f"{prefix}_d{day_number}_t{index}", *entry)
                for index, entry in enumerate(tasks, start=1)
            )
        ))
    return WellnessJourney(
        journey_id=journey_id,
        title_key=f"journey_{slug}_title",
        description_key=f"journey_{slug}_desc",
        icon=icon,
        days=tuple(days)
    )

WELLNESS_JOURNEYS: List[WellnessJourney] = [
    _journey("mindfulness_journey", "mindfulness", "m", "🧘", [
        [("read", "mindfulness_intro"), ("exercise", "box_breathing"), ("journal", "gratitude_journal")],
        [("read", "mindful_observation"), ("exercise", "grounding"), ("journal", "sensory_journal")],
        [("read", "mindful_listening"), ("exercise", "affirmations"), ("journal", "listening_journal")],
        [("read", "mindful_eating"), ("exercise", "thought_tracker"), ("journal", "mindful_eating_journal")],
        [("read", "mindful_walking"), ("exercise", "breathing"),
         ("journal", "mindful_walking_journal", "task_mindful_walking_prompt")],
        [("read", "difficult_thoughts"), ("exercise", "meditation"), ("journal", "thought_observation_journal")],
        [("read", "integrating_mindfulness"), ("exercise", "grounding"), ("journal", "integration_journal")],
    ]),
    _journey("exam_stress_journey", "exam_stress", "e", "✍️", [
        [("read", "understanding_stress"), ("journal", "stress_triggers_journal"), ("exercise", "meditation")],
        [("read", "pomodoro"), ("exercise", "breathing"), ("journal", "study_plan_journal")],
        [("read", "breaks"), ("exercise", "grounding"), ("journal", "break_ideas_journal")],
        [("read", "self_care_exam"), ("exercise", "affirmations"), ("journal", "self_care_plan_journal")],
        [("read", "exam_day_tips"), ("exercise", "meditation"), ("journal", "post_exam_reflection")],
    ]),
    _journey("self_esteem_journey", "self_esteem", "se", "💖", [
        [("read", "self_compassion"), ("journal", "strength_list"), ("exercise", "affirmations")],
        [("read", "negative_self_talk"), ("exercise", "thought_tracker"), ("journal", "reframe_thought")],
        [("read", "celebrate_wins"), ("journal", "small_win_journal"), ("exercise", "meditation")],
        [("read", "set_boundaries"), ("journal", "practice_saying_no"), ("exercise", "grounding")],
        [("read", "embrace_imperfection"), ("journal", "self_acceptance"), ("exercise", "breathing")],
    ]),
    _journey("digital_detox_journey", "digital_detox", "dd", "📵", [
        [("read", "awareness_of_use"), ("journal", "screentime_reflection"), ("exercise", "meditation")],
        [("read", "no_notifications"), ("journal", "notification_impact"), ("exercise", "grounding")],
        [("read", "tech_free_zones"), ("journal", "tech_free_meal"), ("exercise", "breathing")],
        [("read", "mindful_scrolling"), ("journal", "social_media_feelings"), ("exercise", "affirmations")],
        [("read", "reconnect_offline"), ("journal", "offline_hobby"), ("exercise", "bodyscan")],
    ]),
    _journey("anxiety_journey", "anxiety", "a", "🌬️", [
        [("read", "anxiety_is_normal"), ("journal", "anxiety_symptoms"), ("exercise", "breathing")],
        [("read", "rain_method"), ("journal", "practice_rain"), ("exercise", "meditation")],
        [("read", "worry_tree"), ("journal", "use_worry_tree"), ("exercise", "grounding")],
        [("read", "behavioral_activation"), ("journal", "small_action"), ("exercise", "affirmations")],
        [("read", "progress_not_perfection"), ("journal", "toolkit_summary"), ("exercise", "pmr")],
    ]),
]

_JOURNEYS_BY_ID: Dict[str, WellnessJourney] = {j.journey_id: j for j in WELLNESS_JOURNEYS}

def get_journey(journey_id: str) -> Optional[WellnessJourney]:
    return _JOURNEYS_BY_ID.get(journey_id)

# ===== COMMUNITY =====

@dataclass(frozen=True)
class CommunityCircle:
    circle_id: str
    title_key: str
    description_key: str
    icon: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'id': self.circle_id,
            'title_key': self.title_key,
            'description_key': self.description_key,
            'icon': self.icon
        }

COMMUNITY_CIRCLES: List[CommunityCircle] = [
    CommunityCircle("university_life", "circle_university_life_title", "circle_university_life_desc", "🎓"),
    CommunityCircle("creative_passions", "circle_creative_passions_title", "circle_creative_passions_desc", "🎨"),
]

def get_circle(circle_id: str) -> Optional[CommunityCircle]:
    for circle in COMMUNITY_CIRCLES:
        if circle.circle_id == circle_id:
            return circle
    return None

ANONYMOUS_ADJECTIVES = ["Kind", "Brave", "Wise", "Calm", "Happy", "Gentle", "Strong", "Curious", "Creative", "Hopeful"]
ANONYMOUS_NOUNS = ["Panda", "Lotus", "River", "Star", "Mountain", "Sparrow", "Tiger", "Phoenix", "Voyager", "Dreamer"]

# ===== HELPLINES =====

@dataclass(frozen=True)
class Helpline:
    name_key: str
    org_key: str
    number: str
    tel: str

    def to_dict(self) -> Dict[str, str]:
        return {'name_key': self.name_key, 'org_key': self.org_key, 'number': self.number, 'tel': self.tel}

VERIFIED_HELPLINES: List[Helpline] = [
    Helpline("helpline_kiran_name", "helpline_kiran_org", "1800-599-0019", "18005990019"),
    Helpline("helpline_vandrevala_name", "helpline_vandrevala_org", "1860 2662 345", "18602662345"),
    Helpline("helpline_icall_name", "helpline_icall_org", "9152987821", "9152987821"),
    Helpline("helpline_snehi_name", "helpline_snehi_org", "+91 9582208181", "+919582208181"),
    Helpline("helpline_aasra_name", "helpline_aasra_org", "+91 98204 66726", "+919820466726"),
]

__all__ = [
    'COMMON_PROMPT_INSTRUCTIONS', 'PersonaProfile', 'PERSONAS', 'get_persona_profile',
    'EXERCISES_LINK', 'WellnessTask', 'JourneyDay', 'WellnessJourney', 'WELLNESS_JOURNEYS', 'get_journey',
    'CommunityCircle', 'COMMUNITY_CIRCLES', 'get_circle',
    'ANONYMOUS_ADJECTIVES', 'ANONYMOUS_NOUNS', 'Helpline', 'VERIFIED_HELPLINES'
]
