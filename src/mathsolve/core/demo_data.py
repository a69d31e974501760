"""Built-in problems and leaderboard used when the store is unavailable."""

from __future__ import annotations

from mathsolve.core.models import Category, Problem

DEMO_PROBLEMS: tuple[Problem, ...] = (
    Problem(
        id="demo-1",
        source="Classic Calculus",
        category=Category.CALCULUS,
        difficulty=4,
        statement_latex=r"\int_0^{\infty} \frac{\sin(x)}{x}\, dx",
        question_text="Evaluate the Dirichlet integral above.",
        solution_latex=(
            r"Using the Laplace transform or Feynman's technique, we find: "
            r"\int_0^{\infty} \frac{\sin(x)}{x}\, dx = \frac{\pi}{2}"
        ),
        final_answer="pi/2",
    ),
    Problem(
        id="demo-2",
        source="AMC 2022",
        category=Category.NUMBER_THEORY,
        difficulty=5,
        statement_latex=r"\text{Find the last two digits of } 7^{2022}",
        question_text="Find the last two digits of 7²⁰²².",
        solution_latex=(
            r"7^{2022} \pmod{100}: \text{ The order of 7 mod 100 is 20. } "
            r"2022 = 20 \times 101 + 2, \text{ so } 7^{2022} \equiv 7^2 = 49."
        ),
        final_answer="49",
    ),
    Problem(
        id="demo-3",
        source="IMO 1972",
        category=Category.COMBINATORICS,
        difficulty=6,
        statement_latex=(
            r"\text{How many ways can you arrange 8 non-attacking rooks "
            r"on a standard 8×8 chessboard?}"
        ),
        question_text=(
            "Count the number of ways to place 8 non-attacking rooks "
            "on a standard 8×8 chessboard."
        ),
        solution_latex=(
            "Each row must contain exactly one rook, and no two rooks can share "
            "a column. This is equivalent to counting permutations of 8 columns: "
            "8! = 40320."
        ),
        final_answer="40320",
    ),
    Problem(
        id="demo-4",
        source="Putnam 2019",
        category=Category.PROBABILITY,
        difficulty=5,
        statement_latex=(
            r"\text{Two fair dice are rolled. What is the probability "
            r"that the sum is a prime?}"
        ),
        question_text=(
            "Two fair dice are rolled. What is the probability that the sum "
            "is a prime number? Express as a fraction."
        ),
        solution_latex=(
            "Primes possible: 2,3,5,7,11. Count favorable: (1,1)=2, "
            "(1,2),(2,1)=3, (1,4),(2,3),(3,2),(4,1)=5, "
            "(1,6),(2,5),(3,4),(4,3),(5,2),(6,1)=7, (5,6),(6,5)=11. "
            "Total=15, P=15/36=5/12."
        ),
        final_answer="5/12",
    ),
    Problem(
        id="demo-5",
        source="AIME 2021 I",
        category=Category.GEOMETRY,
        difficulty=7,
        statement_latex=(
            r"\text{A circle of radius } r \text{ is inscribed in a right "
            r"triangle with legs 9 and 40. Find } r."
        ),
        question_text=(
            "A circle is inscribed in a right triangle with legs 9 and 40. "
            "Find the radius of the inscribed circle."
        ),
        solution_latex=(
            r"Hypotenuse = \sqrt{81+1600} = 41. For inscribed circle: "
            r"r = (a+b-c)/2 = (9+40-41)/2 = 8/2 = 4."
        ),
        final_answer="4",
    ),
)

# (username, total_score, elo_rating)
DEMO_LEADERS: tuple[tuple[str, int, int], ...] = (
    ("euler_reborn", 6820, 2180),
    ("primeHunter", 5410, 2050),
    ("calculus_god", 4900, 1980),
    ("infinite_series", 3750, 1870),
    ("ramanujan_fan", 3100, 1800),
    ("vectorspace", 2550, 1730),
    ("modular_mage", 2100, 1650),
    ("dirichlet99", 1680, 1560),
    ("proofbycontrad", 1250, 1500),
    ("topoloPher", 820, 1420),
)
