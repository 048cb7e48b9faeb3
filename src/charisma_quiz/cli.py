"""
Command-line interface for charisma-quiz

The interactive quiz in the terminal, plus one-shot commands for generating
questions, running an analysis, sharing the quiz and opening the sales page.
"""

import argparse
import asyncio
import json
import logging
import sys
import textwrap
from typing import Callable, List, Optional

from .agents.content import QuizContentService, AnalysisError, GenerationError
from .config import config, check_credentials
from .providers import ModelProvider, MockProvider, PROVIDERS, get_provider
from .quiz.machine import QuizMachine, fallback_result
from .quiz.schema import AppState, Question, QuizResult, SessionState
from .share import ShareService, ShareOutcome, open_sales_page

logger = logging.getLogger(__name__)

GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"

WIDTH = 64
OPTION_LETTERS = "ABCDEFGH"

TESTIMONIALS = [
    {
        "name": "Ricardo Mendes",
        "text": "Eu travava sempre que o assunto acabava. O ebook de 'Quebra de Gelo' salvou meu último encontro. Ela não parava de rir e a conexão foi imediata.",
        "role": "Comprou há 2 semanas",
    },
    {
        "name": "Lucas Ferreira",
        "text": "Achei que fosse papo furado, mas a técnica de Tensão Positiva é surreal. Transformei um 'oi' desajeitado em três encontros na mesma semana.",
        "role": "Aluno do Método",
    },
    {
        "name": "André Silva",
        "text": "Direto ao ponto. Sem teorias malucas, só psicologia aplicada. Li de manhã e apliquei no bar à noite. O resultado fala por si só.",
        "role": "Aluno Verificado",
    },
]


# =============================================================================
# RENDERING
# =============================================================================

def _wrap(text: str, indent: str = "  ") -> str:
    return "\n".join(
        textwrap.fill(p, width=WIDTH, initial_indent=indent, subsequent_indent=indent) if p.strip() else ""
        for p in text.split("\n")
    )


def format_testimonial(testimonial: dict) -> str:
    """Format one testimonial card."""
    quote = _wrap(f"“{testimonial['text']}”", "    ")
    return f"{quote}\n    {BOLD}{testimonial['name']}{RESET} {DIM}· {testimonial['role']}{RESET}"


def render_welcome() -> str:
    """The landing screen."""
    lines = [
        "",
        f"{BOLD}PSICOLOGIA{RESET}",
        f"{RED}{BOLD}DA ATRAÇÃO{RESET}",
        "═" * 12,
        "",
        _wrap(
            "Descubra os E-books Psicológicos que Transformam Qualquer Conversa Chata "
            "em um Encontro sem Esforço.",
            "",
        ),
        "",
        f"{DIM}RESULTADOS REAIS DE ALUNOS{RESET}",
        "",
    ]
    for testimonial in TESTIMONIALS:
        lines.append(format_testimonial(testimonial))
        lines.append("")
    return "\n".join(lines)


def render_progress(state: SessionState) -> str:
    """Phase counter, hits and a progress bar."""
    bar_width = WIDTH - 2
    filled = round(state.progress * bar_width)
    phase = f"FASE {state.current_question_index + 1} / {state.total_questions}"
    hits = f"ACERTOS: {state.score}"
    return (
        f"{phase}{hits:>{WIDTH - len(phase)}}\n"
        f"[{RED}{'█' * filled}{RESET}{'·' * (bar_width - filled)}]"
    )


def format_option(question: Question, index: int, selected: Optional[int], revealed: bool) -> str:
    """Format one answer option, marking right/wrong once revealed."""
    letter = OPTION_LETTERS[index] if index < len(OPTION_LETTERS) else str(index + 1)
    text = question.options[index]

    if not revealed:
        return f"  {letter}) {text}"
    if question.is_correct(index):
        return f"  {GREEN}✓ {letter}) {text}{RESET}"
    if index == selected:
        return f"  {RED}✗ {letter}) {text}{RESET}"
    return f"  {DIM}  {letter}) {text}{RESET}"


def render_question(state: SessionState) -> str:
    """The current question card, with explanation once answered."""
    question = state.current_question
    if question is None:
        return ""

    revealed = state.explanation_visible
    lines = [render_progress(state), "", _wrap(question.scenario, ""), ""]
    lines.extend(
        format_option(question, i, state.selected_option, revealed)
        for i in range(len(question.options))
    )

    if revealed:
        if question.is_correct(state.selected_option):
            verdict = f"{GREEN}Resposta certa!{RESET}"
        else:
            verdict = f"{RED}Não foi dessa vez.{RESET}"
        lines.extend(["", verdict, _wrap(question.explanation)])

    return "\n".join(lines)


def render_results(result: QuizResult) -> str:
    """The final diagnosis and sales pitch."""
    lines = [
        "┌" + "─" * (WIDTH - 2) + "┐",
        f"  {RED}DIAGNÓSTICO FINAL{RESET}",
        "",
        f"  {BOLD}{result.archetype}{RESET}",
        f"  Potencial de Atração: {BOLD}{result.percentage}%{RESET} ({result.score}/{result.total_questions})",
        "",
        f"  {BOLD}RELATÓRIO DO MENTOR{RESET}",
        _wrap(result.feedback),
        "",
        f"  {BOLD}QUEM APLICOU, APROVOU{RESET}",
        "",
    ]
    for testimonial in TESTIMONIALS:
        lines.append(format_testimonial(testimonial))
        lines.append("")

    first, second = (t["name"].split(" ")[0] for t in TESTIMONIALS[:2])
    lines.extend([
        f"  {BOLD}Não deixe a conversa morrer.{RESET}",
        _wrap(
            "Acesse agora o guia completo e descubra os gatilhos exatos para gerar atração "
            f"instantânea, assim como o {first} e o {second}."
        ),
        "└" + "─" * (WIDTH - 2) + "┘",
    ])
    return "\n".join(lines)


def render_error(state: SessionState) -> str:
    """The connection failure screen."""
    lines = [
        f"{RED}⚠  Falha na Conexão{RESET}",
        "O servidor não respondeu. Verifique sua chave de API.",
    ]
    if state.error:
        lines.append(f"{DIM}{state.error}{RESET}")
    return "\n".join(lines)


def format_share_outcome(outcome: ShareOutcome, url: str) -> str:
    if outcome == ShareOutcome.SHARED:
        return f"{GREEN}✓ Quiz compartilhado!{RESET}"
    if outcome == ShareOutcome.COPIED:
        return f"{GREEN}✓ Link Copiado!{RESET} {DIM}{url}{RESET}"
    if not url:
        return f"{YELLOW}Nenhum link para compartilhar. Defina SHARE_URL ou use --url.{RESET}"
    return f"{YELLOW}Compartilhe este link:{RESET} {url}"


# =============================================================================
# INTERACTIVE QUIZ
# =============================================================================

def parse_option(answer: str, option_count: int) -> Optional[int]:
    """Map a typed letter or number onto an option index."""
    answer = answer.strip().upper()
    if not answer:
        return None
    if len(answer) == 1 and answer in OPTION_LETTERS[:option_count]:
        return OPTION_LETTERS.index(answer)
    if answer.isdigit() and 1 <= int(answer) <= option_count:
        return int(answer) - 1
    return None


async def run_play(
    machine: QuizMachine,
    share: ShareService,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    opener: Optional[Callable[[str], bool]] = None,
) -> SessionState:
    """
    Drive the quiz from terminal input until the user quits.

    Args:
        machine: The session to drive
        share: Share action for the welcome and results screens
        read: Prompt-and-read function (input by default)
        write: Output function (print by default)
        opener: Browser opener for the sales page

    Returns:
        The session state at exit
    """
    sales_kwargs = {"opener": opener} if opener is not None else {}

    while True:
        state = machine.state

        try:
            if state.app_state == AppState.WELCOME:
                write(render_welcome())
                choice = read("[Enter] iniciar avaliação · [c] compartilhar · [q] sair > ").strip().lower()
                if choice == "q":
                    return machine.state
                if choice == "c":
                    write(format_share_outcome(await share.share(), share.url))
                    continue
                write(f"{RED}Calibrando Cenários...{RESET} {DIM}acessando banco de dados comportamental{RESET}")
                await machine.start()

            elif state.app_state == AppState.QUIZ:
                write(render_question(state))
                if not state.explanation_visible:
                    answer = read("Sua resposta > ")
                    if answer.strip().lower() == "q":
                        return machine.state
                    index = parse_option(answer, len(state.current_question.options))
                    if index is None:
                        write(f"{YELLOW}Escolha uma das opções.{RESET}")
                        continue
                    machine.select_option(index)
                else:
                    label = "ver resultado" if state.is_last_question else "próxima"
                    if read(f"[Enter] {label} > ").strip().lower() == "q":
                        return machine.state
                    if state.is_last_question:
                        write(f"{RED}Processando Perfil...{RESET}")
                    await machine.advance()

            elif state.app_state == AppState.RESULTS:
                write(render_results(state.result))
                choice = read("[d] destravar e-books · [r] refazer teste · [c] compartilhar · [q] sair > ").strip().lower()
                if choice == "d":
                    if not open_sales_page(config.funnel.sales_url, **sales_kwargs):
                        write(f"Abra no navegador: {config.funnel.sales_url}")
                elif choice == "r":
                    machine.restart()
                elif choice == "c":
                    write(format_share_outcome(await share.share(), share.url))
                elif choice == "q":
                    return machine.state

            elif state.app_state == AppState.ERROR:
                write(render_error(state))
                choice = read("[Enter] tentar novamente · [q] sair > ").strip().lower()
                if choice == "q":
                    return machine.state
                machine.restart()

            else:
                # LOADING/ANALYZING only exist while a provider call is awaited
                logger.error("Unexpected idle state %s", state.app_state.value)
                machine.restart()

        except EOFError:
            return machine.state


# =============================================================================
# COMMANDS
# =============================================================================

def build_provider(name: Optional[str] = None, model: Optional[str] = None) -> ModelProvider:
    """Create a provider, honouring the process-wide API_KEY."""
    name = name or config.models.provider
    if name == "mock":
        return MockProvider()

    if name == config.models.provider:
        model = model or config.models.model

    kwargs = {}
    if model:
        kwargs["default_model"] = model
    if config.models.api_key:
        kwargs["api_key"] = config.models.api_key
    return get_provider(name, **kwargs)


def build_content(args: argparse.Namespace) -> QuizContentService:
    """Content service for the provider the command line selects."""
    provider_name = "mock" if args.mock else args.provider
    return QuizContentService(
        build_provider(provider_name, args.model),
        question_count=getattr(args, "questions", None) or config.quiz.question_count,
        max_tokens=config.quiz.max_tokens,
        temperature=config.models.temperature,
    )


async def cmd_play(args: argparse.Namespace) -> int:
    content = build_content(args)
    machine = QuizMachine(content)
    try:
        await run_play(machine, ShareService())
    finally:
        await content.provider.close()
    return 0


async def cmd_questions(args: argparse.Namespace) -> int:
    content = build_content(args)
    try:
        questions = await content.generate_questions()
    except GenerationError as e:
        print(f"{RED}{e}{RESET}", file=sys.stderr)
        return 1
    finally:
        await content.provider.close()

    if args.json:
        print(json.dumps([q.to_dict() for q in questions], ensure_ascii=False, indent=2))
        return 0

    for question in questions:
        print(f"{BOLD}{question.id}.{RESET} {question.scenario}")
        for i in range(len(question.options)):
            print(format_option(question, i, None, revealed=True))
        print(_wrap(question.explanation, "     "))
        print()

    usage = content.last_usage
    print(f"{DIM}Tokens: {usage.get('input_tokens', 0):,} in / {usage.get('output_tokens', 0):,} out{RESET}")
    return 0


async def cmd_analyze(args: argparse.Namespace) -> int:
    if args.total <= 0 or not 0 <= args.score <= args.total:
        print("score must be between 0 and total, and total must be positive", file=sys.stderr)
        return 2

    content = build_content(args)
    try:
        result = await content.analyze_performance(args.score, args.total)
    except AnalysisError as e:
        logger.warning("Performance analysis failed, using fallback result: %s", e)
        result = fallback_result(args.score, args.total)
    finally:
        await content.provider.close()

    print(result.to_json() if args.json else render_results(result))
    return 0


async def cmd_share(args: argparse.Namespace) -> int:
    share = ShareService(url=args.url)
    if not share.url:
        print("No link to share: pass --url or set SHARE_URL", file=sys.stderr)
        return 2
    print(format_share_outcome(await share.share(), share.url))
    return 0


def cmd_unlock(args: argparse.Namespace) -> int:
    url = config.funnel.sales_url
    if not open_sales_page(url):
        print(f"Abra no navegador: {url}")
    return 0


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="charisma-quiz",
        description="Quiz de psicologia da atração com perguntas e diagnóstico gerados por IA",
        epilog="Example: charisma-quiz play --provider gemini",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_model_options(sub: argparse.ArgumentParser):
        sub.add_argument(
            "--provider",
            choices=sorted(PROVIDERS.keys()),
            default=config.models.provider,
            help=f"Model provider (default: {config.models.provider})"
        )
        sub.add_argument(
            "--model",
            help="Model ID (default: provider default)"
        )
        sub.add_argument(
            "--mock",
            action="store_true",
            help="Use mock AI (for testing without API key)"
        )

    play_parser = subparsers.add_parser("play", help="Take the quiz interactively")
    add_model_options(play_parser)
    play_parser.add_argument(
        "--questions",
        type=positive_int,
        help=f"Number of questions (default: {config.quiz.question_count})"
    )

    questions_parser = subparsers.add_parser("questions", help="Generate a question set and print it")
    add_model_options(questions_parser)
    questions_parser.add_argument("--questions", type=positive_int, help="Number of questions")
    questions_parser.add_argument("--json", action="store_true", help="Output as JSON")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a score and print the diagnosis")
    add_model_options(analyze_parser)
    analyze_parser.add_argument("score", type=int, help="Correct answers")
    analyze_parser.add_argument("total", type=int, help="Total questions")
    analyze_parser.add_argument("--json", action="store_true", help="Output as JSON")

    share_parser = subparsers.add_parser("share", help="Share the quiz link")
    share_parser.add_argument("--url", help="Link to share (default: SHARE_URL)")

    subparsers.add_parser("unlock", help="Open the sales page")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log.level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    if args.command in ("play", "questions", "analyze") and not args.mock:
        check_credentials(config, args.provider)

    if args.command == "unlock":
        return cmd_unlock(args)

    commands = {
        "play": cmd_play,
        "questions": cmd_questions,
        "analyze": cmd_analyze,
        "share": cmd_share,
    }
    return asyncio.run(commands[args.command](args))


if __name__ == "__main__":
    sys.exit(main())
