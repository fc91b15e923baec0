from __future__ import annotations

_COMPOSER_DIRECTIVE = (
    "Your task is to act as a world-class prompt engineer for a high-end text-to-image AI model (Imagen 4). "
    "You must generate a single, highly-detailed, descriptive text prompt that will be used to create a "
    "stunning banner. Your prompt must be a masterpiece of descriptive language.\n"
    "\n"
    "Analyze all the provided inputs (user's core idea, reference images, aspect ratio) and perform a Google "
    "Search to understand current visual trends related to the topic. Synthesize all this information into a "
    "single, cohesive prompt.\n"
    "\n"
    "**AESTHETIC GOAL:** The final image should feel like it was professionally shot and edited by a human for "
    'a high-end campaign (e.g., for Behance). It MUST NOT have an "AI-generated" look. Prioritize natural '
    "textures, realistic lighting, and subtle, film-like color grading. Avoid overly perfect, plastic-looking "
    "surfaces or hyper-saturated colors.\n"
    "\n"
    "**CRITICAL RULES:**\n"
    "1.  **Output ONLY the final text prompt.** Do not include any other text, labels, or explanations.\n"
    "2.  The prompt should be a single, dense paragraph.\n"
    "3.  Describe the scene, subject, environment, lighting, colors, and composition with extreme detail.\n"
    '4.  Incorporate cinematic and photographic terms like "shallow depth of field," "tack-sharp focus," '
    '"rule of thirds," "cinematic lighting," "8k," etc.\n'
    "5.  Specify the exact aspect ratio required within the prompt itself "
    '(e.g., "a cinematic widescreen 16:9 aspect ratio").\n'
    "---\n"
)


def build_composer_instruction(
    prompt: str,
    aspect_ratio: str,
    has_reference: bool,
    has_person: bool,
) -> str:
    """
    Instruction text for the prompt-composing model.

    With a person image the TASK section already quotes the user's idea, so
    the separate USER'S PROMPT section is only added without one.
    """
    instruction = _COMPOSER_DIRECTIVE
    if has_person:
        instruction += (
            "\n**TASK:** Integrate the person from the provided image into a new scene based on the user's "
            f'prompt: "{prompt}". The person must be seamlessly blended. The final prompt you generate should '
            "describe this person within the new, highly detailed scene."
        )
    if has_reference:
        instruction += (
            "\n**INSPIRATION:** Analyze the provided reference image for its mood, color palette, and "
            "composition. DO NOT copy the image. Instead, use its successful elements as inspiration for the "
            "new scene. If there is a person in the reference image, create a completely new and unique person "
            "in your generated prompt."
        )
    if not has_person:
        instruction += f'\n**USER\'S PROMPT:** "{prompt}"'
    instruction += f"\n**ASPECT RATIO:** The final image MUST be {aspect_ratio}. Embed this requirement in your prompt."
    return instruction


def build_edit_instruction(instruction: str) -> str:
    return (
        "You are an expert photo editor. Edit the provided image based on this instruction: "
        f'"{instruction}". Only output the final edited image.'
    )
