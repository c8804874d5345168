TECH_ICON_BASE_URL = "https://cdn.jsdelivr.net/gh/devicons/devicon/icons"
FALLBACK_TECH_ICON = "/tech.svg"

INTERVIEW_COVERS = [
    "/adobe.png",
    "/amazon.png",
    "/facebook.png",
    "/hostinger.png",
    "/pinterest.png",
    "/quora.png",
    "/reddit.png",
    "/skype.png",
    "/spotify.png",
    "/telegram.png",
    "/tiktok.png",
    "/yahoo.png",
]

# Keys are already normalized: lowercase, no trailing ".js", no whitespace.
TECH_MAPPINGS = {
    "react": "react",
    "reactjs": "react",
    "next": "nextjs",
    "nextjs": "nextjs",
    "vue": "vuejs",
    "vuejs": "vuejs",
    "express": "express",
    "expressjs": "express",
    "node": "nodejs",
    "nodejs": "nodejs",
    "mongo": "mongodb",
    "mongodb": "mongodb",
    "mongoose": "mongoose",
    "mysql": "mysql",
    "postgres": "postgresql",
    "postgresql": "postgresql",
    "sqlite": "sqlite",
    "firebase": "firebase",
    "docker": "docker",
    "kubernetes": "kubernetes",
    "aws": "amazonwebservices",
    "azure": "azure",
    "gcp": "googlecloud",
    "digitalocean": "digitalocean",
    "heroku": "heroku",
    "photoshop": "photoshop",
    "adobephotoshop": "photoshop",
    "html": "html5",
    "html5": "html5",
    "css": "css3",
    "css3": "css3",
    "sass": "sass",
    "scss": "sass",
    "less": "less",
    "tailwind": "tailwindcss",
    "tailwindcss": "tailwindcss",
    "bootstrap": "bootstrap",
    "jquery": "jquery",
    "ts": "typescript",
    "typescript": "typescript",
    "js": "javascript",
    "javascript": "javascript",
    "angular": "angularjs",
    "angularjs": "angularjs",
    "ember": "ember",
    "emberjs": "ember",
    "backbone": "backbonejs",
    "backbonejs": "backbonejs",
    "nestjs": "nestjs",
    "graphql": "graphql",
    "apollo": "apollographql",
    "webpack": "webpack",
    "babel": "babel",
    "rollup": "rollup",
    "rollupjs": "rollup",
    "parcel": "parcel",
    "parceljs": "parcel",
    "npm": "npm",
    "yarn": "yarn",
    "git": "git",
    "github": "github",
    "gitlab": "gitlab",
    "bitbucket": "bitbucket",
    "figma": "figma",
    "prisma": "prisma",
    "redux": "redux",
    "redis": "redis",
    "selenium": "selenium",
    "cypress": "cypressio",
    "jest": "jest",
    "mocha": "mocha",
    "chai": "chai",
    "karma": "karma",
    "vuex": "vuejs",
    "nuxt": "nuxtjs",
    "nuxtjs": "nuxtjs",
    "strapi": "strapi",
    "wordpress": "wordpress",
    "netlify": "netlify",
    "vercel": "vercel",
    "python": "python",
    "django": "django",
    "flask": "flask",
    "fastapi": "fastapi",
    "java": "java",
    "spring": "spring",
    "go": "go",
    "golang": "go",
    "rust": "rust",
    "c#": "csharp",
    "csharp": "csharp",
    "c++": "cplusplus",
    "cplusplus": "cplusplus",
}

INTERVIEW_TYPE_BADGES = {
    "Behavioral": "bg-light-400",
    "Mixed": "bg-light-600",
    "Technical": "bg-light-800",
}
DEFAULT_BADGE = "bg-light-600"

FEEDBACK_CATEGORIES = (
    "Communication Skills",
    "Technical Knowledge",
    "Problem Solving",
    "Cultural Fit",
    "Confidence and Clarity",
)

INTERVIEWER_SYSTEM_PROMPT = """You are a professional job interviewer conducting a real-time voice interview with a candidate. Your goal is to assess their qualifications, motivation, and fit for the role.

Interview guidelines:
Follow the structured question flow:
{{questions}}

Engage naturally and react appropriately:
Listen actively to responses and acknowledge them before moving forward.
Ask brief follow-up questions if a response is vague or needs more detail.
Keep the conversation flowing smoothly while staying in control.

Be professional, yet warm and welcoming:
Use official yet friendly language.
Keep responses concise and to the point, like in a real voice interview.
Avoid robotic phrasing. Sound natural and conversational.

Answer the candidate's questions professionally:
If asked about the role, company, or expectations, give a clear and relevant answer.
If unsure, redirect the candidate to HR for more details.

Conclude the interview properly:
Thank the candidate for their time.
Tell them the company will reach out soon with feedback.
End the conversation on a polite and positive note.

This is a voice conversation, so keep every answer short. Do not ramble."""

INTERVIEWER_ASSISTANT = {
    "name": "Interviewer",
    "firstMessage": (
        "Hello! Thank you for taking the time to speak with me today. "
        "I'm excited to learn more about you and your experience."
    ),
    "transcriber": {
        "provider": "deepgram",
        "model": "nova-2",
        "language": "en",
    },
    "voice": {
        "provider": "11labs",
        "voiceId": "sarah",
        "stability": 0.4,
        "similarityBoost": 0.8,
        "speed": 0.9,
        "style": 0.5,
        "useSpeakerBoost": True,
    },
    "model": {
        "provider": "openai",
        "model": "gpt-4",
        "messages": [
            {"role": "system", "content": INTERVIEWER_SYSTEM_PROMPT},
        ],
    },
}
