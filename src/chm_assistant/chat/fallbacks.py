"""Fixed replies used when no knowledge item or model reply is available."""

import logging

logger = logging.getLogger(__name__)

GREETING_MESSAGE = """Hello! I'm the Just In Time Medicine assistant for the MSU College of Human Medicine.

I can help you with:

• **Curriculum phases**: M1 foundations, MCE rotations and LCE clerkships
• **Learning societies**: Jane Addams, John Dewey, Abraham Flexner and William Osler
• **Research**: the ASK project, summer research, electives and funding
• **Board preparation**: USMLE Step 1 and Step 2 CK resources
• **Practice tests**: try "create a test for M1 week 3"

To browse a subject, ask something like "show me CHM research topics". What would you like to know?"""

CAPABILITY_OVERVIEW = """I'm here to help with information about CHM's curriculum, learning societies, and student resources. I can assist with questions about:

• Learning societies (Jane Addams, John Dewey, Abraham Flexner, William Osler)
• Academic phases (M1, MCE, LCE)
• Research opportunities and the ASK project
• USMLE board preparation
• Student support services
• Practice tests for a curriculum week

What would you like to know more about?"""

STEP1_ANSWER = """**USMLE Step 1 Preparation**

Step 1 tests your command of the foundational sciences and is reported pass/fail.

• **Core resources**: First Aid for the USMLE Step 1, Pathoma and Sketchy
• **Question banks**: UWorld Step 1 and the AMBOSS question bank
• **Self-assessment**: NBME practice forms and the UWorld self-assessments
• **Timeline**: most CHM students sit Step 1 after completing M1 and before MCE rotations
• **Support**: the CHM library board-prep guide and academic support coaching

Build a dedicated study schedule, track your practice scores, and reach out to your learning society mentor if you need help planning."""

STEP2_ANSWER = """**USMLE Step 2 CK Preparation**

Step 2 CK assesses clinical knowledge and is scored, so it weighs heavily in residency applications.

• **Question banks**: UWorld Step 2 CK and AMBOSS
• **Shelf overlap**: NBME clinical subject exams from your MCE rotations build directly toward Step 2
• **Self-assessment**: NBME CCSSA forms and the UWorld self-assessments
• **Timeline**: most students test during LCE, before submitting ERAS applications

Plan your exam date with your residency timeline in mind."""

LEARNING_SOCIETIES_ANSWER = """CHM has four learning societies, each with a unique educational philosophy:

• **Jane Addams Society**: Focuses on social justice and community health advocacy
• **John Dewey Society**: Emphasizes problem-based learning and critical thinking
• **Abraham Flexner Society**: Grounds learning in scientific rigor and research
• **William Osler Society**: Centers on patient care and clinical excellence

Each society provides mentorship, community, and specialized learning opportunities. Would you like to know more about any specific society?"""

M1_ANSWER = """The M1 year focuses on foundational medical sciences including:

• Anatomy and physiology
• Biochemistry and molecular biology
• Pathology fundamentals
• Basic clinical skills
• Professional development

Students also begin their learning society activities and community engagement projects. The curriculum integrates basic sciences with early clinical exposure to build a strong foundation for your medical career."""

MCE_ANSWER = """The Middle Clinical Experience (MCE) involves clinical rotations across various specialties:

• Internal Medicine
• Surgery
• Pediatrics
• Psychiatry
• Obstetrics & Gynecology
• Family Medicine
• Emergency Medicine

During MCE, you'll work directly with patients under supervision, apply your foundational knowledge, and explore different medical specialties to inform your career path."""

LCE_ANSWER = """The Late Clinical Experience (LCE) is your final phase before residency:

• Acting internships with increased patient responsibility
• Required clerkships and advanced electives
• USMLE Step 2 CK preparation
• Residency application and the Match

Use LCE electives to explore specialties and to strengthen your residency application."""

RESEARCH_ANSWER = """CHM supports student research throughout the curriculum:

• **ASK Research Project**: the longitudinal scholarly project every student completes
• **Summer Research Program**: full-time mentored research between M1 and MCE
• **Research Elective (HM 691)**: dedicated research time during LCE
• **Office of Research**: funding announcements, IRB guidance and conference support

Ask me about any of these for details, or try "show me CHM research topics"."""

SUPPORT_ANSWER = """CHM offers academic and personal support for every student:

• **Academic support**: study skills coaching, tutoring and board-prep planning
• **Wellness**: counseling services and mental health resources
• **Learning societies**: faculty mentors who can help with academic and career questions

If you are struggling, reach out early. Support is confidential and available throughout your training."""

CANVAS_ANSWER = """Canvas is CHM's learning management system where you can:

• Access course materials and assignments
• Submit coursework and view grades
• Participate in discussion forums
• Access recorded lectures and resources
• Connect with classmates and faculty

Log in through MyMSU or directly at canvas.msu.edu with your MSU credentials."""

# Checked in order; the first tier with a keyword contained in the message wins
CANNED_ANSWERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("step 1", "step1", "step one"), STEP1_ANSWER),
    (("step 2", "step2", "step two", "ck exam"), STEP2_ANSWER),
    (("learning societ", "societies", "jane addams", "dewey", "flexner", "osler"),
     LEARNING_SOCIETIES_ANSWER),
    (("m1", "first year", "foundation"), M1_ANSWER),
    (("mce", "clinical rotation", "rotations"), MCE_ANSWER),
    (("lce", "clerkship", "acting internship"), LCE_ANSWER),
    (("research", "ask project", "scholarly"), RESEARCH_ANSWER),
    (("wellness", "academic support", "mental health", "counseling", "tutoring"),
     SUPPORT_ANSWER),
    (("canvas", "learning management"), CANVAS_ANSWER),
)


def canned_answer(message: str) -> str:
    """Keyword-matched canned reply, or the capability overview when nothing matches."""
    text = message.lower()
    for keywords, answer in CANNED_ANSWERS:
        if any(keyword in text for keyword in keywords):
            logger.debug("Canned answer matched on %r", keywords[0])
            return answer
    return CAPABILITY_OVERVIEW
