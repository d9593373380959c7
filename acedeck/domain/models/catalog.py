"""Built-in Class 12 subject and chapter catalog.

Lookups accept either the short id (e.g. 'physics', 'p1') or the
case-insensitive display name. Unknown subjects and chapters are allowed
through `resolve` unchanged so free-form topics still work.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from acedeck.domain.models.common import ChapterTitle, SubjectName


@dataclass(frozen=True)
class Chapter:
    """A single chapter (or the full-revision pseudo chapter) of a subject."""
    id: str
    title: str
    description: str = ""


@dataclass(frozen=True)
class Subject:
    """A subject with its ordered chapters."""
    id: str
    name: str
    icon: str
    chapters: Tuple[Chapter, ...] = field(default_factory=tuple)


SUBJECTS: Tuple[Subject, ...] = (
    Subject("physics", "Physics", "⚡", (
        Chapter("p1", "Electric Charges and Fields", "Coulomb's Law, Gauss Law, and Electric Dipoles."),
        Chapter("p2", "Electrostatic Potential and Capacitance", "Capacitors, Dielectrics, and Potential Energy."),
        Chapter("p3", "Current Electricity", "Ohm's Law, Kirchhoff's Laws, and Cells."),
        Chapter("p4", "Moving Charges & Magnetism", "Biot-Savart Law and Ampere's Circuital Law."),
        Chapter("p5", "Magnetism & Matter", "Earth magnetism and properties of magnetic materials."),
        Chapter("p6", "Electromagnetic Induction", "Faraday's Laws and Lenz's Law."),
        Chapter("p7", "Alternating Current", "LCR circuits, Power factor, and Transformers."),
        Chapter("p8", "Electromagnetic Waves", "EM Spectrum and Maxwell's Equations."),
        Chapter("p9", "Ray Optics & Optical Instruments", "Reflection, Refraction, Lenses, and Telescopes."),
        Chapter("p10", "Wave Optics", "Interference, Huygens Principle, and Diffraction."),
        Chapter("p11", "Dual Nature of Radiation & Matter", "Photoelectric effect and De-Broglie waves."),
        Chapter("p12", "Atoms", "Bohr model and Atomic Spectra."),
        Chapter("p13", "Nuclei", "Nuclear Forces, Radioactivity, and Binding Energy."),
        Chapter("p14", "Semiconductor Electronics", "P-N junction, Diodes, and Logic Gates."),
        Chapter("p_rev", "FULL SUBJECT REVISION", "Master Formulas, Laws, and High-Yield Revision Points for 2026 Boards."),
    )),
    Subject("maths", "Mathematics", "➗", (
        Chapter("m1", "Relations & Functions", "Equivalence relations and composite functions."),
        Chapter("m2", "Inverse Trigonometry", "Principal values and properties."),
        Chapter("m3", "Matrices", "Operations, Transpose, Inverse."),
        Chapter("m4", "Determinants", "Properties and solving equations using Cramer's rule."),
        Chapter("m5", "Continuity & Differentiability", "Chain rule, Implicit differentiation."),
        Chapter("m6", "Applications of Derivatives", "Rates, Maxima/Minima, Tangents."),
        Chapter("m7", "Integrals", "Indefinite and Definite integration."),
        Chapter("m8", "Applications of Integrals", "Area under curves."),
        Chapter("m9", "Differential Equations", "Order, Degree, Solution methods."),
        Chapter("m10", "Vector Algebra", "Dot and Cross products."),
        Chapter("m11", "3D Geometry", "Lines and Planes in space."),
        Chapter("m12", "Linear Programming", "Optimization under constraints."),
        Chapter("m13", "Probability", "Bayes theorem, Distributions."),
        Chapter("m_rev", "FULL SUBJECT REVISION", "Formula Book, Shortcuts, and Important Theorem List for 2026 Boards."),
    )),
    Subject("chemistry", "Chemistry", "🧪", (
        Chapter("c1", "Solutions", "Colligative properties and solubility."),
        Chapter("c2", "Electrochemistry", "Nernst equation, Conductance and Cells."),
        Chapter("c3", "Chemical Kinetics", "Rate of reaction, Order and Arrhenius Eq."),
        Chapter("c4", "d & f Block Elements", "Transition metals and Lanthanoids."),
        Chapter("c5", "Coordination Compounds", "Ligands, IUPAC, VBT and CFT."),
        Chapter("c6", "Haloalkanes & Haloarenes", "SN1/SN2 mechanisms and Nucleophilic substitution."),
        Chapter("c7", "Alcohols, Phenols & Ethers", "Syntheses and major chemical reactions."),
        Chapter("c8", "Aldehydes, Ketones & Carboxylic Acids", "Nucleophilic addition and Name reactions."),
        Chapter("c9", "Amines", "Basic strength, Diazonium salts and Hoffmann Bromamide."),
        Chapter("c10", "Biomolecules", "Carbohydrates, Proteins, DNA and Vitamins."),
        Chapter("c_rev", "FULL SUBJECT REVISION", "All Name Reactions, Mechanisms, and Formula Sheet for 2026 Boards."),
    )),
    Subject("biology", "Biology", "🧬", (
        Chapter("b1", "Sexual Reproduction in Flowering Plants", "Pollination and double fertilization."),
        Chapter("b2", "Human Reproduction", "Male/Female systems, Embryogenesis."),
        Chapter("b3", "Reproductive Health", "Birth control, STDs, Infertility."),
        Chapter("b4", "Principles of Inheritance & Variation", "Mendelian and molecular genetics."),
        Chapter("b5", "Molecular Basis of Inheritance", "DNA, RNA, Replication, Translation."),
        Chapter("b6", "Evolution", "Origins and natural selection."),
        Chapter("b7", "Human Health & Disease", "Immunity, HIV, Cancer."),
        Chapter("b8", "Microbes in Human Welfare", "Sewage, Biogas, Antibiotics."),
        Chapter("b9", "Biotechnology: Principles & Processes", "rDNA technology and PCR."),
        Chapter("b10", "Biotechnology: Applications", "Medicine, Agriculture and Transgenics."),
        Chapter("b11", "Organisms & Populations", "Interactions and adaptations."),
        Chapter("b12", "Ecosystem", "Energy flow, Ecological Pyramids and cycles."),
        Chapter("b13", "Biodiversity & Conservation", "Threats and strategies."),
        Chapter("b_rev", "FULL SUBJECT REVISION", "Important Diagrams List, Differences, and Glossary for 2026 Boards."),
    )),
    Subject("cs", "Computer Science", "💻", (
        Chapter("cs1", "Python Revision Tour", "Review of Class 11 concepts."),
        Chapter("cs2", "Functions", "Types, scope, and parameters."),
        Chapter("cs3", "File Handling", "Text, Binary, CSV files."),
        Chapter("cs4", "Data Structures (Stack)", "Implementation using lists."),
        Chapter("cs5", "Computer Networks", "Topology, protocols, internet."),
        Chapter("cs6", "Database Concepts", "Relational model, keys."),
        Chapter("cs7", "Structured Query Language", "DDL, DML commands."),
        Chapter("cs8", "Python-SQL Interface", "Connecting Python to MySQL."),
        Chapter("cs_rev", "FULL SUBJECT REVISION", "Python Code Snippets, SQL Query List, and Network Topology Revision."),
    )),
    Subject("english", "English", "📖", (
        Chapter("ef1", "Flamingo: The Last Lesson", "Prose - Alphonse Daudet."),
        Chapter("ef2", "Flamingo: Lost Spring", "Prose - Anees Jung."),
        Chapter("ef3", "Flamingo: Deep Water", "Prose - William Douglas."),
        Chapter("ef4", "Flamingo: The Rattrap", "Prose - Selma Lagerlöf."),
        Chapter("ef5", "Flamingo: Indigo", "Prose - Louis Fischer."),
        Chapter("ef6", "Flamingo: Poets and Pancakes", "Prose - Asokamitran."),
        Chapter("ef7", "Flamingo: The Interview", "Prose - Christopher Silvester."),
        Chapter("ef8", "Flamingo: Going Places", "Prose - A. R. Barton."),
        Chapter("efp1", "Poem: My Mother at Sixty-six", "Poetry - Kamala Das."),
        Chapter("efp2", "Poem: Keeping Quiet", "Poetry - Pablo Neruda."),
        Chapter("efp3", "Poem: A Thing of Beauty", "Poetry - John Keats."),
        Chapter("efp4", "Poem: A Roadside Stand", "Poetry - Robert Frost."),
        Chapter("efp5", "Poem: Aunt Jennifer's Tigers", "Poetry - Adrienne Rich."),
        Chapter("ev1", "Vistas: The Third Level", "Supplementary - Jack Finney."),
        Chapter("ev2", "Vistas: The Tiger King", "Supplementary - Kalki."),
        Chapter("ev3", "Vistas: Journey to the end of the Earth", "Supplementary - Tishani Doshi."),
        Chapter("ev4", "Vistas: The Enemy", "Supplementary - Pearl S. Buck."),
        Chapter("ev5", "Vistas: On the Face of It", "Supplementary - Susan Hill."),
        Chapter("ev6", "Vistas: Memories of Childhood", "Supplementary - Zitkala-Sa & Bama."),
        Chapter("e_rev", "FULL SUBJECT REVISION", "Summaries, Poetic Devices, and Character Sketches Master List."),
    )),
    Subject("physed", "Physical Education", "⚽", (
        Chapter("pe1", "Management of Events", "Tournaments and committees."),
        Chapter("pe2", "Children & Women in Sports", "Motor development and issues."),
        Chapter("pe3", "Yoga as Preventive Measure", "Asanas for lifestyle diseases."),
        Chapter("pe4", "Physical Ed & Sports for CWSN", "Adaptive education."),
        Chapter("pe5", "Sports & Nutrition", "Macro/Micro nutrients, Diet."),
        Chapter("pe6", "Test & Measurement", "Fitness tests and SAI tests."),
        Chapter("pe7", "Physiology & Injuries", "Impact of exercise and recovery."),
        Chapter("pe8", "Biomechanics & Sports", "Laws of motion, Equilibrium."),
        Chapter("pe9", "Psychology & Sports", "Personality and motivation."),
        Chapter("pe10", "Training in Sports", "Strength, Endurance, Speed."),
        Chapter("pe_rev", "FULL SUBJECT REVISION", "All Fixtures, Asanas list, and Sports Injuries Revision Chart."),
    )),
)


def find_subject(query: str) -> Optional[Subject]:
    """Finds a subject by id or case-insensitive name."""
    needle = (query or "").strip().lower()
    for subject in SUBJECTS:
        if needle in (subject.id, subject.name.lower()):
            return subject
    return None


def find_chapter(subject: Subject, query: str) -> Optional[Chapter]:
    """Finds a chapter of `subject` by id or case-insensitive title."""
    needle = " ".join((query or "").split()).lower()
    for chapter in subject.chapters:
        if needle in (chapter.id, chapter.title.lower()):
            return chapter
    return None


def search_chapters(subject: Subject, text: str) -> List[Chapter]:
    """Chapters whose title contains `text` (case-insensitive)."""
    needle = (text or "").lower()
    return [c for c in subject.chapters if needle in c.title.lower()]


def resolve(subject_query: str, chapter_query: str) -> Tuple[SubjectName, ChapterTitle]:
    """Returns canonical (subject name, chapter title), or the inputs unchanged."""
    subject = find_subject(subject_query)
    if subject is None:
        return SubjectName(subject_query), ChapterTitle(chapter_query)
    chapter = find_chapter(subject, chapter_query)
    return SubjectName(subject.name), ChapterTitle(chapter.title if chapter else chapter_query)
